"""Tests for domain entities."""

import dataclasses
from datetime import datetime, UTC

import pytest

from finclassify.domain.entities import (
    ClassificationReport,
    ClassificationResult,
    MatchType,
    PatternGroup,
    RuleProposal,
    RuleTier,
    TIER_ORDER,
)
from rule_helpers import make_rule, make_snapshot


def test_tier_order_and_confidence():
    assert TIER_ORDER == (RuleTier.CRITICAL, RuleTier.HIGH, RuleTier.MEDIUM, RuleTier.LOW)
    assert [tier.confidence for tier in TIER_ORDER] == [1.0, 0.85, 0.6, 0.4]
    assert RuleTier.CRITICAL.rank < RuleTier.LOW.rank


def test_snapshot_sorts_rules():
    """Test that snapshot rules are stored in traversal order."""
    low = make_rule(1, "A", MatchType.CONTAINS, RuleTier.LOW, "1", insertion_order=1)
    critical_late = make_rule(2, "B", MatchType.CONTAINS, RuleTier.CRITICAL, "2", insertion_order=9)
    critical_early = make_rule(3, "C", MatchType.CONTAINS, RuleTier.CRITICAL, "3", insertion_order=4)

    snapshot = make_snapshot(low, critical_late, critical_early)

    assert [rule.id for rule in snapshot] == [3, 2, 1]
    assert snapshot.rules_for_tier(RuleTier.CRITICAL) == (critical_early, critical_late)
    assert snapshot.tier_counts() == {
        RuleTier.CRITICAL: 2,
        RuleTier.HIGH: 0,
        RuleTier.MEDIUM: 0,
        RuleTier.LOW: 1,
    }
    assert snapshot.get_rule(2) == critical_late
    assert snapshot.get_rule(99) is None
    assert len(snapshot) == 3


def test_entities_are_immutable():
    snapshot = make_snapshot(make_rule(1, "A", MatchType.CONTAINS, RuleTier.LOW, "1"))

    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot.version = 2
    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot.rules[0].pattern = "B"


def test_unclassified_result():
    result = ClassificationResult.unclassified(5)

    assert result.transaction_id == 5
    assert result.account_code is None
    assert result.confidence == 0.0
    assert not result.is_classified
    assert result.needs_review(0.0)


def test_needs_review_uses_strict_threshold():
    result = ClassificationResult(1, 2, "8100", 0.85, RuleTier.HIGH)

    assert not result.needs_review()
    assert not result.needs_review(0.85)
    assert result.needs_review(0.9)
    assert ClassificationResult(1, 3, "9600", 0.6, RuleTier.MEDIUM).needs_review()


def test_pattern_group_suggested_action():
    proposal = RuleProposal("XYZ BANK CHARGE", MatchType.CONTAINS, RuleTier.MEDIUM, "9600")
    with_proposal = PatternGroup("XYZ BANK CHARGE", 2, (1, 2), ("XYZ BANK CHARGE 1",), "9600", proposal)
    without = PatternGroup("ZZZ", 1, (3,), ("ZZZ",))

    assert with_proposal.suggested_action == "Add medium rule: contains 'XYZ BANK CHARGE' -> 9600"
    assert without.suggested_action.startswith("Review manually")
    definition = proposal.to_definition(name="Bank charges")
    assert definition.pattern == "XYZ BANK CHARGE"
    assert definition.name == "Bank charges"


def test_report_percentages():
    report = ClassificationReport(
        company_id=1,
        generated_at=datetime.now(UTC),
        total_transactions=8,
        classified_count=6,
        unclassified_count=2,
        tier_counts={RuleTier.CRITICAL: 4, RuleTier.LOW: 2},
    )

    assert report.tier_percentages[RuleTier.CRITICAL] == 50.0
    assert report.tier_percentages[RuleTier.HIGH] == 0.0
    assert report.classified_percentage == 75.0
    assert report.unclassified_percentage == 25.0


def test_empty_report_percentages():
    report = ClassificationReport(
        company_id=1,
        generated_at=datetime.now(UTC),
        total_transactions=0,
        classified_count=0,
        unclassified_count=0,
    )

    assert report.classified_percentage == 0.0
    assert set(report.tier_percentages.values()) == {0.0}
