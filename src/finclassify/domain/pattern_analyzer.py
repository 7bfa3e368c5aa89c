"""Pattern analysis over stored classification history.

The analyzer is read-only. It reports which descriptions the catalog fails to
classify confidently and proposes rules for them, but never publishes a rule:
proposals are applied by an administrator through ``RuleCatalogService.add_rule``.
"""

import logging
from collections import Counter
from datetime import date, datetime, UTC
from typing import Iterable, Optional, TYPE_CHECKING

from finclassify.domain.classifier import normalize_description
from finclassify.domain.entities import (
    AnalysisReport,
    ClassificationReport,
    MatchType,
    PatternGroup,
    RuleProposal,
    RuleTier,
    TIER_ORDER,
    Transaction,
)
from finclassify.domain.errors import NotFoundError, ValidationError, company_not_found

if TYPE_CHECKING:
    from finclassify.database.base import Database

logger = logging.getLogger(__name__)

# Results below this confidence are reported by analyze() unless told otherwise
DEFAULT_ANALYSIS_THRESHOLD = 0.6
KEY_TOKENS = 3
PROPOSAL_TIER = RuleTier.MEDIUM


def _has_digit(token: str) -> bool:
    return any(ch.isdigit() for ch in token)


def pattern_key(description: str) -> str:
    """Grouping key of a description: its leading tokens without digits.

    Reference numbers and dates vary between otherwise identical bank
    descriptions, so the key stops at the first token containing a digit
    ("XYZ BANK CHARGE 12/05" -> "XYZ BANK CHARGE"). A description starting
    with such a token falls back to its first digit-free tokens, and a
    description without any falls back to itself.
    """
    tokens = normalize_description(description).split()
    leading: list[str] = []
    for token in tokens:
        if _has_digit(token) or len(leading) == KEY_TOKENS:
            break
        leading.append(token)
    if leading:
        return " ".join(leading)

    words = [token for token in tokens if not _has_digit(token)][:KEY_TOKENS]
    if words:
        return " ".join(words)
    return " ".join(tokens)


class PatternAnalyzer:
    """Read-only analyzer of classification coverage."""

    def __init__(self, db: "Database"):
        """Initialize pattern analyzer.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_company(self, company_id: int) -> None:
        if not self.db.company_exists(company_id):
            raise NotFoundError(company_not_found(company_id))

    def analyze(
        self,
        company_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        threshold: float = DEFAULT_ANALYSIS_THRESHOLD,
        top_n: Optional[int] = None,
    ) -> AnalysisReport:
        """Group transactions whose latest classification is below a confidence threshold.

        Transactions that were never classified count as unclassified.

        Args:
            company_id: Company ID
            start_date: Optional first transaction date (inclusive)
            end_date: Optional last transaction date (inclusive)
            threshold: Results with lower confidence are reported
            top_n: Optional limit on the number of groups

        Returns:
            Report with groups ranked by size, then key

        Raises:
            NotFoundError: If the company doesn't exist
            ValidationError: If the threshold is outside [0, 1]
        """
        self._require_company(company_id)
        if not 0.0 <= threshold <= 1.0:
            raise ValidationError(f"Threshold must be between 0 and 1, got {threshold}")

        transactions = self.db.list_transactions(company_id, start_date=start_date, end_date=end_date)
        latest = self.db.get_latest_results(company_id, start_date=start_date, end_date=end_date)

        flagged = []
        for transaction in transactions:
            result = latest.get(transaction.id)
            if result is None or not result.is_classified or result.confidence < threshold:
                flagged.append(transaction)

        groups = self._group(company_id, flagged, top_n)
        logger.info(
            "Analyzed %d transactions for company %s: %d below %.2f in %d groups",
            len(transactions),
            company_id,
            len(flagged),
            threshold,
            len(groups),
        )
        return AnalysisReport(
            company_id=company_id,
            start_date=start_date,
            end_date=end_date,
            threshold=threshold,
            scanned=len(transactions),
            below_threshold=len(flagged),
            groups=tuple(groups),
        )

    def generate_classification_report(self, company_id: int, top_n: int = 10) -> ClassificationReport:
        """Summarize the latest classification of all of a company's transactions.

        Args:
            company_id: Company ID
            top_n: Number of unmatched groups to include

        Returns:
            Coverage report

        Raises:
            NotFoundError: If the company doesn't exist
        """
        self._require_company(company_id)
        transactions = self.db.list_transactions(company_id)
        latest = self.db.get_latest_results(company_id)

        tier_counts = {tier: 0 for tier in TIER_ORDER}
        unmatched = []
        for transaction in transactions:
            result = latest.get(transaction.id)
            if result is None or not result.is_classified:
                unmatched.append(transaction)
            else:
                tier_counts[result.tier] += 1

        total = len(transactions)
        return ClassificationReport(
            company_id=company_id,
            generated_at=datetime.now(UTC),
            total_transactions=total,
            classified_count=total - len(unmatched),
            unclassified_count=len(unmatched),
            tier_counts=tier_counts,
            top_unmatched=tuple(self._group(company_id, unmatched, top_n)),
        )

    def _confirmed_codes_by_description(self, company_id: int) -> dict[str, Counter]:
        """Count manually confirmed account codes per normalized description."""
        confirmations = self.db.get_confirmed_accounts(company_id)
        if not confirmations:
            return {}
        codes: dict[str, Counter] = {}
        for transaction in self.db.list_transactions(company_id):
            confirmation = confirmations.get(transaction.id)
            if confirmation is None:
                continue
            description = normalize_description(transaction.raw_description)
            codes.setdefault(description, Counter())[confirmation.account_code] += 1
        return codes

    def _group(
        self, company_id: int, transactions: Iterable[Transaction], top_n: Optional[int]
    ) -> list[PatternGroup]:
        members: dict[str, list[Transaction]] = {}
        for transaction in transactions:
            members.setdefault(pattern_key(transaction.raw_description), []).append(transaction)
        if not members:
            return []

        confirmed = self._confirmed_codes_by_description(company_id)
        groups = []
        for key, group_transactions in members.items():
            descriptions = list(
                dict.fromkeys(normalize_description(t.raw_description) for t in group_transactions)
            )
            votes: Counter = Counter()
            for description in descriptions:
                votes.update(confirmed.get(description, Counter()))

            suggestion = None
            proposal = None
            if votes:
                # Most confirmations first, then lowest code
                suggestion = min(votes.items(), key=lambda item: (-item[1], item[0]))[0]
            if suggestion is not None and key:
                proposal = RuleProposal(
                    pattern=key,
                    match_type=MatchType.CONTAINS,
                    tier=PROPOSAL_TIER,
                    target_account_code=suggestion,
                )

            groups.append(
                PatternGroup(
                    key=key,
                    count=len(group_transactions),
                    transaction_ids=tuple(t.id for t in group_transactions),
                    descriptions=tuple(descriptions),
                    suggested_account_code=suggestion,
                    proposal=proposal,
                )
            )

        groups.sort(key=lambda group: (-group.count, group.key))
        if top_n is not None:
            groups = groups[:top_n]
        return groups
