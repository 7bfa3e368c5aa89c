"""In-memory rule and snapshot builders for classifier tests."""

from datetime import datetime, UTC

from finclassify.domain.entities import MappingRule, MatchType, RuleCatalogSnapshot, RuleSource, RuleTier


def make_rule(
    rule_id: int,
    pattern: str,
    match_type: MatchType,
    tier: RuleTier,
    target: str,
    insertion_order: int | None = None,
    company_id: int = 1,
) -> MappingRule:
    """Build an in-memory published rule."""
    return MappingRule(
        id=rule_id,
        company_id=company_id,
        name=f"rule-{rule_id}",
        pattern=pattern,
        match_type=match_type,
        tier=tier,
        target_account_code=target,
        insertion_order=insertion_order if insertion_order is not None else rule_id,
        active=True,
        source=RuleSource.CUSTOM,
        created_at=datetime.now(UTC),
    )


def make_snapshot(*rules: MappingRule, company_id: int = 1, version: int = 1) -> RuleCatalogSnapshot:
    """Build an in-memory catalog snapshot."""
    return RuleCatalogSnapshot(company_id=company_id, version=version, rules=tuple(rules))
