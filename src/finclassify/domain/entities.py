"""Domain model entities for finclassify.

These are pure data classes representing business concepts, independent of
database schema. Every entity is frozen: snapshots and classification results
are shared between threads and between runs, and must never change once built.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class AccountType(str, Enum):
    """Top-level account classification."""

    ASSET = "Asset"
    LIABILITY = "Liability"
    EQUITY = "Equity"
    REVENUE = "Revenue"
    EXPENSE = "Expense"


class NormalBalance(str, Enum):
    """Side on which an account category normally carries its balance."""

    DEBIT = "debit"
    CREDIT = "credit"


class Direction(str, Enum):
    """Direction of a bank transaction relative to the bank account."""

    DEBIT = "debit"
    CREDIT = "credit"


class MatchType(str, Enum):
    """How a mapping rule pattern is compared with a description."""

    EXACT = "exact"
    CONTAINS = "contains"
    REGEX = "regex"


class RuleTier(str, Enum):
    """Priority band of a mapping rule.

    Declaration order is the traversal order used by the classifier.
    """

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Position of the tier in the traversal order (0 is first)."""
        return TIER_ORDER.index(self)

    @property
    def confidence(self) -> float:
        """Fixed confidence reported for a match in this tier."""
        return TIER_CONFIDENCE[self]


TIER_ORDER: tuple[RuleTier, ...] = tuple(RuleTier)

TIER_CONFIDENCE: dict[RuleTier, float] = {
    RuleTier.CRITICAL: 1.0,
    RuleTier.HIGH: 0.85,
    RuleTier.MEDIUM: 0.6,
    RuleTier.LOW: 0.4,
}

# Auto-posting policy: results below this confidence are flagged for review
DEFAULT_REVIEW_THRESHOLD = 0.85


class RuleSource(str, Enum):
    """Origin of a mapping rule record."""

    DEFAULT = "default"
    CUSTOM = "custom"


@dataclass(frozen=True)
class Company:
    """Company registry entry."""

    id: int
    name: str
    created_at: datetime


@dataclass(frozen=True)
class AccountCategory:
    """Chart-of-accounts category owned by one company."""

    id: int
    company_id: int
    name: str
    account_type: AccountType
    normal_balance: NormalBalance
    created_at: datetime


@dataclass(frozen=True)
class Account:
    """Chart-of-accounts entry. ``code`` is unique per company."""

    id: int
    company_id: int
    category_id: int
    code: str
    name: str
    account_type: AccountType
    active: bool
    created_at: datetime


@dataclass(frozen=True)
class RuleDefinition:
    """Unpublished mapping rule, as supplied by the default table or an admin."""

    pattern: str
    match_type: MatchType
    tier: RuleTier
    target_account_code: str
    name: Optional[str] = None


@dataclass(frozen=True)
class MappingRule:
    """Published mapping rule.

    A ``company_id`` of None marks a global default rule shared by every
    company. Rules are never edited in place: a replacement is a new record
    whose ``supersedes_id`` points at the rule it deactivated.
    """

    id: int
    company_id: Optional[int]
    name: str
    pattern: str
    match_type: MatchType
    tier: RuleTier
    target_account_code: str
    insertion_order: int
    active: bool
    source: RuleSource
    created_at: datetime
    supersedes_id: Optional[int] = None

    @property
    def is_global(self) -> bool:
        """True if the rule applies to every company."""
        return self.company_id is None

    @property
    def sort_key(self) -> tuple[int, int, int]:
        """Total order used inside a snapshot."""
        return (self.tier.rank, self.insertion_order, self.id)


@dataclass(frozen=True)
class RuleCatalogSnapshot:
    """Immutable, versioned view of the rules active for one company.

    ``rules`` is always stored in traversal order: tiers critical to low,
    insertion order inside each tier.
    """

    company_id: int
    version: int
    rules: tuple[MappingRule, ...] = ()

    def __post_init__(self) -> None:
        ordered = tuple(sorted(self.rules, key=lambda rule: rule.sort_key))
        object.__setattr__(self, "rules", ordered)

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self):
        return iter(self.rules)

    def rules_for_tier(self, tier: RuleTier) -> tuple[MappingRule, ...]:
        """Rules of one tier, in insertion order."""
        return tuple(rule for rule in self.rules if rule.tier == tier)

    def tier_counts(self) -> dict[RuleTier, int]:
        """Number of rules per tier, every tier present."""
        counts = {tier: 0 for tier in TIER_ORDER}
        for rule in self.rules:
            counts[rule.tier] += 1
        return counts

    def get_rule(self, rule_id: int) -> Optional[MappingRule]:
        """Find a rule of this snapshot by ID."""
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        return None


@dataclass(frozen=True)
class Transaction:
    """Imported bank transaction. Never mutated after import."""

    id: int
    company_id: int
    date: date
    raw_description: str
    amount: Decimal
    direction: Direction
    reference: Optional[str]
    imported_at: datetime


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of classifying one transaction.

    ``account_code`` is None exactly when ``confidence`` is 0.0, which is the
    unclassified outcome.
    """

    transaction_id: Optional[int]
    matched_rule_id: Optional[int]
    account_code: Optional[str]
    confidence: float
    tier: Optional[RuleTier]

    @classmethod
    def unclassified(cls, transaction_id: Optional[int] = None) -> "ClassificationResult":
        """Build the terminal no-match result."""
        return cls(
            transaction_id=transaction_id,
            matched_rule_id=None,
            account_code=None,
            confidence=0.0,
            tier=None,
        )

    @property
    def is_classified(self) -> bool:
        """True if a rule matched."""
        return self.account_code is not None

    def needs_review(self, threshold: float = DEFAULT_REVIEW_THRESHOLD) -> bool:
        """True if the result must be confirmed by a person before posting."""
        return not self.is_classified or self.confidence < threshold


@dataclass(frozen=True)
class ClassificationRun:
    """One persisted batch of classification results."""

    id: int
    company_id: int
    catalog_version: int
    result_count: int
    created_at: datetime


@dataclass(frozen=True)
class AccountConfirmation:
    """Manually confirmed account for a transaction."""

    transaction_id: int
    account_code: str
    confirmed_by: Optional[str]
    confirmed_at: datetime


@dataclass(frozen=True)
class RuleProposal:
    """Rule the analyzer suggests an administrator add."""

    pattern: str
    match_type: MatchType
    tier: RuleTier
    target_account_code: str

    def to_definition(self, name: Optional[str] = None) -> RuleDefinition:
        """Convert to a definition accepted by ``RuleCatalogService.add_rule``."""
        return RuleDefinition(
            pattern=self.pattern,
            match_type=self.match_type,
            tier=self.tier,
            target_account_code=self.target_account_code,
            name=name,
        )


@dataclass(frozen=True)
class PatternGroup:
    """Low-confidence or unmatched transactions sharing a description key."""

    key: str
    count: int
    transaction_ids: tuple[int, ...]
    descriptions: tuple[str, ...]
    suggested_account_code: Optional[str] = None
    proposal: Optional[RuleProposal] = None

    @property
    def suggested_action(self) -> str:
        """Human-readable next step for this group."""
        if self.proposal is not None:
            return (
                f"Add {self.proposal.tier.value} rule: {self.proposal.match_type.value} "
                f"'{self.proposal.pattern}' -> {self.proposal.target_account_code}"
            )
        if self.suggested_account_code is not None:
            return (
                f"Review manually: confirmed as {self.suggested_account_code} "
                "but the descriptions give no rule pattern"
            )
        return "Review manually: no confirmed account for these transactions"


@dataclass(frozen=True)
class AnalysisReport:
    """Read-only scan of low-confidence classifications."""

    company_id: int
    start_date: Optional[date]
    end_date: Optional[date]
    threshold: float
    scanned: int
    below_threshold: int
    groups: tuple[PatternGroup, ...] = ()


@dataclass(frozen=True)
class ClassificationReport:
    """Coverage summary of the latest classification of a company."""

    company_id: int
    generated_at: datetime
    total_transactions: int
    classified_count: int
    unclassified_count: int
    tier_counts: dict[RuleTier, int] = field(default_factory=dict)
    top_unmatched: tuple[PatternGroup, ...] = ()

    def _percentage(self, count: int) -> float:
        if self.total_transactions == 0:
            return 0.0
        return count / self.total_transactions * 100

    @property
    def tier_percentages(self) -> dict[RuleTier, float]:
        """Share of transactions classified in each tier, in percent."""
        return {tier: self._percentage(self.tier_counts.get(tier, 0)) for tier in TIER_ORDER}

    @property
    def classified_percentage(self) -> float:
        return self._percentage(self.classified_count)

    @property
    def unclassified_percentage(self) -> float:
        return self._percentage(self.unclassified_count)
