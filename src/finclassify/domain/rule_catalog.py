"""Rule catalog domain service.

Published rules are append-only records. A company's catalog is read as an
immutable ``RuleCatalogSnapshot`` tagged with the catalog version; every
publication (seed, add, replace, deactivate) records a new revision, so a
snapshot taken before a change keeps classifying exactly as it did.
"""

import logging
import re
import threading
from typing import Iterable, Optional, TYPE_CHECKING

from finclassify.domain.classifier import compile_pattern, normalize_description
from finclassify.domain.default_rules import DEFAULT_RULES
from finclassify.domain.entities import (
    MappingRule,
    MatchType,
    RuleCatalogSnapshot,
    RuleDefinition,
    RuleSource,
    RuleTier,
)
from finclassify.domain.errors import (
    DuplicateDefinitionError,
    InvalidPatternError,
    NotFoundError,
    ValidationError,
    account_code_not_found,
    company_not_found,
    invalid_regex,
    rule_not_found,
)

if TYPE_CHECKING:
    from finclassify.database.base import Database

logger = logging.getLogger(__name__)

_REVISION_SUFFIX = re.compile(r"^(?P<base>.*) \(rev (?P<number>\d+)\)$")


def rule_key(match_type: MatchType, pattern: str) -> tuple[MatchType, str]:
    """Identity of a rule's matching behavior, used to let company rules override global ones."""
    if match_type == MatchType.REGEX:
        return (match_type, pattern.strip())
    return (match_type, normalize_description(pattern))


def _successor_name(name: str) -> str:
    match = _REVISION_SUFFIX.match(name)
    if match:
        return f"{match.group('base')} (rev {int(match.group('number')) + 1})"
    return f"{name} (rev 2)"


def validate_rule(rule: RuleDefinition) -> RuleDefinition:
    """Check a rule definition and return it with enum fields coerced.

    Raises:
        ValidationError: If the pattern or target is empty, or the match type
            or tier is unknown
        InvalidPatternError: If a regex pattern does not compile
    """
    try:
        match_type = MatchType(rule.match_type)
    except ValueError:
        raise ValidationError(
            f"Unknown match type '{rule.match_type}'. Valid types: {', '.join(m.value for m in MatchType)}"
        )
    try:
        tier = RuleTier(rule.tier)
    except ValueError:
        raise ValidationError(
            f"Unknown tier '{rule.tier}'. Valid tiers: {', '.join(t.value for t in RuleTier)}"
        )

    pattern = (rule.pattern or "").strip()
    if not pattern:
        raise ValidationError("Rule pattern must not be empty")
    target = (rule.target_account_code or "").strip()
    if not target:
        raise ValidationError("Rule target account code must not be empty")

    if match_type == MatchType.REGEX:
        try:
            compile_pattern(pattern)
        except re.error as e:
            raise InvalidPatternError(invalid_regex(pattern, str(e))) from e

    return RuleDefinition(
        pattern=pattern,
        match_type=match_type,
        tier=tier,
        target_account_code=target,
        name=rule.name.strip() if rule.name else None,
    )


class RuleCatalogService:
    """Service for publishing mapping rules and loading catalog snapshots."""

    def __init__(self, db: "Database", default_rules: Iterable[RuleDefinition] = DEFAULT_RULES):
        """Initialize rule catalog service.

        Args:
            db: Database instance
            default_rules: Rules copied into a company's catalog the first time
                it is loaded
        """
        self.db = db
        self.default_rules = tuple(default_rules)
        self._snapshots: dict[int, RuleCatalogSnapshot] = {}
        self._lock = threading.Lock()

    def _require_company(self, company_id: int) -> None:
        if not self.db.company_exists(company_id):
            raise NotFoundError(company_not_found(company_id))

    def seed_default_rules(self, company_id: int) -> int:
        """Copy the default rule table into a company with no rules yet.

        Args:
            company_id: Company ID

        Returns:
            Number of rules inserted (0 if the company already had rules)

        Raises:
            NotFoundError: If the company does not exist
        """
        self._require_company(company_id)
        if not self.default_rules or self.db.count_rules(company_id) > 0:
            return 0

        rows = []
        for index, definition in enumerate(self.default_rules, start=1):
            valid = validate_rule(definition)
            name = valid.name or f"Default rule {index}"
            rows.append((name, valid.pattern, valid.match_type, valid.tier, valid.target_account_code))

        try:
            created = self.db.create_rules(
                company_id,
                rows,
                source=RuleSource.DEFAULT,
                revision_description=f"Seeded {len(rows)} default rules",
            )
        except DuplicateDefinitionError:
            # Another loader seeded this company first
            logger.warning("Default rules for company %s were seeded concurrently", company_id)
            return 0

        logger.info("Seeded %d default rules for company %s", created, company_id)
        return created

    def load_catalog(self, company_id: int) -> RuleCatalogSnapshot:
        """Load the current rule catalog of a company.

        Active global rules are merged with the company's active rules; a
        company rule with the same match type and pattern as a global rule
        replaces it. The returned snapshot is shared with other callers and is
        reused until a new catalog version is published.

        Args:
            company_id: Company ID

        Returns:
            Immutable catalog snapshot

        Raises:
            NotFoundError: If the company does not exist
        """
        self.seed_default_rules(company_id)
        version = self.db.get_catalog_version(company_id)

        with self._lock:
            cached = self._snapshots.get(company_id)
        if cached is not None and cached.version == version:
            logger.debug("Catalog cache hit for company %s at version %s", company_id, version)
            return cached

        company_rules = self.db.list_rules(company_id)
        overridden = {rule_key(rule.match_type, rule.pattern) for rule in company_rules}
        global_rules = [
            rule
            for rule in self.db.list_rules(None)
            if rule_key(rule.match_type, rule.pattern) not in overridden
        ]
        snapshot = RuleCatalogSnapshot(
            company_id=company_id,
            version=version,
            rules=tuple(company_rules + global_rules),
        )

        with self._lock:
            current = self._snapshots.get(company_id)
            if current is None or current.version <= version:
                self._snapshots[company_id] = snapshot
        logger.debug(
            "Loaded catalog for company %s at version %s with %d rules", company_id, version, len(snapshot)
        )
        return snapshot

    def add_rule(self, company_id: Optional[int], rule: RuleDefinition) -> MappingRule:
        """Validate and publish a new rule.

        Args:
            company_id: Company ID, or None for a global rule shared by every company
            rule: Rule definition

        Returns:
            The published rule

        Raises:
            NotFoundError: If the company does not exist, or the target account
                is missing from the company's chart of accounts
            ValidationError: If the definition is incomplete
            InvalidPatternError: If a regex pattern does not compile
            PersistenceFailureError: If the store write fails; neither the rule
                nor a new catalog version is published
        """
        if company_id is not None:
            self._require_company(company_id)
        valid = validate_rule(rule)

        if company_id is not None:
            self._require_target_account(company_id, valid.target_account_code)
            # Seeding only happens while the company has no rules
            self.seed_default_rules(company_id)

        name = valid.name or f"{valid.match_type.value}:{valid.pattern} -> {valid.target_account_code}"
        rule_id = self.db.create_rule(
            company_id=company_id,
            name=name,
            pattern=valid.pattern,
            match_type=valid.match_type,
            tier=valid.tier,
            target_account_code=valid.target_account_code,
            source=RuleSource.CUSTOM,
            revision_description=f"Added rule '{name}'",
        )
        logger.info(
            "Published rule %s (%s %s '%s' -> %s) for %s",
            rule_id,
            valid.tier.value,
            valid.match_type.value,
            valid.pattern,
            valid.target_account_code,
            f"company {company_id}" if company_id is not None else "all companies",
        )
        return self.db.get_rule(rule_id)

    def replace_rule(self, company_id: Optional[int], rule_id: int, rule: RuleDefinition) -> MappingRule:
        """Edit a rule by deactivating it and publishing its successor.

        The successor keeps the original's position within its tier.

        Raises:
            NotFoundError: If the rule does not belong to the company, or the
                target account is missing
            ValidationError: If the rule is no longer active or the definition
                is invalid
        """
        old = self._get_owned_rule(company_id, rule_id)
        if not old.active:
            raise ValidationError(f"Rule {rule_id} is not active and cannot be replaced")
        valid = validate_rule(rule)
        if company_id is not None:
            self._require_target_account(company_id, valid.target_account_code)

        new_id = self.db.replace_rule(
            rule_id,
            name=valid.name or _successor_name(old.name),
            pattern=valid.pattern,
            match_type=valid.match_type,
            tier=valid.tier,
            target_account_code=valid.target_account_code,
            revision_description=f"Replaced rule {rule_id}",
        )
        logger.info("Rule %s superseded by rule %s", rule_id, new_id)
        return self.db.get_rule(new_id)

    def deactivate_rule(self, company_id: Optional[int], rule_id: int) -> None:
        """Deactivate a rule. Rules are never deleted.

        Raises:
            NotFoundError: If the rule does not belong to the company
        """
        rule = self._get_owned_rule(company_id, rule_id)
        if not rule.active:
            logger.debug("Rule %s is already inactive", rule_id)
            return
        self.db.deactivate_rule(rule_id, revision_description=f"Deactivated rule {rule_id}")
        logger.info("Deactivated rule %s", rule_id)

    def list_rules(self, company_id: int, include_inactive: bool = False) -> list[MappingRule]:
        """List a company's rules together with the global rules.

        Raises:
            NotFoundError: If the company does not exist
        """
        self._require_company(company_id)
        return self.db.list_rules(company_id, include_inactive=include_inactive, include_global=True)

    def _get_owned_rule(self, company_id: Optional[int], rule_id: int) -> MappingRule:
        rule = self.db.get_rule(rule_id)
        if rule is None or rule.company_id != company_id:
            raise NotFoundError(rule_not_found(rule_id))
        return rule

    def _require_target_account(self, company_id: int, code: str) -> None:
        # Companies without a chart yet accept any target
        if not self.db.list_accounts(company_id):
            return
        if self.db.get_account_by_code(company_id, code) is None:
            raise NotFoundError(account_code_not_found(company_id, code))
