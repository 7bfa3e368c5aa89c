"""Tests for Database interface returning domain models."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from finclassify.database import Database, SQLAlchemyDatabase
from finclassify.domain import entities
from finclassify.domain.entities import (
    AccountType,
    ClassificationResult,
    Direction,
    MatchType,
    NormalBalance,
    RuleSource,
    RuleTier,
)
from finclassify.domain.errors import ConflictError, DuplicateDefinitionError, NotFoundError


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_implements_interface(self, temp_db):
        """Test that the SQLAlchemy store implements every abstract operation."""
        assert isinstance(temp_db, Database)
        assert isinstance(temp_db, SQLAlchemyDatabase)

    def test_get_company_returns_domain_model(self, temp_db):
        """Test that get_company returns a domain Company entity."""
        company_id = temp_db.create_company("Acme")

        company = temp_db.get_company(company_id)

        assert isinstance(company, entities.Company)
        assert company.name == "Acme"
        assert isinstance(company.created_at, datetime)
        assert temp_db.get_company_by_name("Acme") == company
        assert temp_db.get_company(999) is None

    def test_duplicate_company_name(self, temp_db):
        temp_db.create_company("Acme")

        with pytest.raises(ConflictError):
            temp_db.create_company("Acme")

    def test_account_returns_domain_model(self, temp_db, sample_company):
        """Test that accounts carry their category's type."""
        category_id = temp_db.create_category(
            sample_company.id, "Finance Costs", AccountType.EXPENSE, NormalBalance.DEBIT
        )
        temp_db.create_account(sample_company.id, category_id, "9600", "Bank Charges", AccountType.EXPENSE)

        account = temp_db.get_account_by_code(sample_company.id, "9600")

        assert isinstance(account, entities.Account)
        assert account.category_id == category_id
        assert account.account_type == AccountType.EXPENSE
        assert account.active
        category = temp_db.get_category_by_name(sample_company.id, "Finance Costs")
        assert category.normal_balance == NormalBalance.DEBIT

    def test_duplicate_account_code(self, temp_db, sample_company):
        """Test that account codes are unique per company."""
        category_id = temp_db.create_category(
            sample_company.id, "Finance Costs", AccountType.EXPENSE, NormalBalance.DEBIT
        )
        temp_db.create_account(sample_company.id, category_id, "9600", "Bank Charges", AccountType.EXPENSE)

        with pytest.raises(DuplicateDefinitionError, match="Account '9600' already exists"):
            temp_db.create_account(sample_company.id, category_id, "9600", "Other", AccountType.EXPENSE)
        with pytest.raises(DuplicateDefinitionError):
            temp_db.create_category(sample_company.id, "Finance Costs", AccountType.EXPENSE, NormalBalance.DEBIT)

        # The session is still usable after the failed inserts
        assert len(temp_db.list_accounts(sample_company.id)) == 1

    def test_rule_round_trip(self, temp_db, sample_company):
        """Test that stored rules come back as domain MappingRule entities."""
        rule_id = temp_db.create_rule(
            sample_company.id, "Rent", "RENT", MatchType.CONTAINS, RuleTier.HIGH, "8200"
        )

        rule = temp_db.get_rule(rule_id)

        assert isinstance(rule, entities.MappingRule)
        assert rule.match_type == MatchType.CONTAINS
        assert rule.tier == RuleTier.HIGH
        assert rule.source == RuleSource.CUSTOM
        assert rule.active
        assert rule.supersedes_id is None
        assert temp_db.count_rules(sample_company.id) == 1

    def test_create_rules_is_all_or_nothing(self, temp_db, sample_company):
        """Test that a bulk insert with a duplicate name stores nothing."""
        temp_db.create_rule(sample_company.id, "Rent", "RENT", MatchType.CONTAINS, RuleTier.HIGH, "8200")
        rows = [
            ("Fees", "FEE", MatchType.CONTAINS, RuleTier.LOW, "9600"),
            ("Rent", "RENT", MatchType.CONTAINS, RuleTier.HIGH, "8200"),
        ]

        with pytest.raises(DuplicateDefinitionError):
            temp_db.create_rules(sample_company.id, rows)

        assert temp_db.count_rules(sample_company.id) == 1

    def test_list_rules_scopes(self, temp_db, sample_company):
        """Test company, global and inactive rule listing."""
        own = temp_db.create_rule(sample_company.id, "Rent", "RENT", MatchType.CONTAINS, RuleTier.HIGH, "8200")
        shared = temp_db.create_rule(None, "VAT", "SARS VAT", MatchType.CONTAINS, RuleTier.CRITICAL, "9800")
        temp_db.deactivate_rule(own)

        assert [r.id for r in temp_db.list_rules(sample_company.id)] == []
        assert [r.id for r in temp_db.list_rules(sample_company.id, include_inactive=True)] == [own]
        assert [r.id for r in temp_db.list_rules(sample_company.id, include_global=True)] == [shared]
        assert [r.id for r in temp_db.list_rules(None)] == [shared]

    def test_replace_rule(self, temp_db, sample_company):
        """Test that a replacement is a new record linked to its predecessor."""
        old_id = temp_db.create_rule(sample_company.id, "Rent", "RENT", MatchType.CONTAINS, RuleTier.HIGH, "8200")

        new_id = temp_db.replace_rule(old_id, "Rent (rev 2)", "RENT", MatchType.CONTAINS, RuleTier.HIGH, "8300")

        old, new = temp_db.get_rule(old_id), temp_db.get_rule(new_id)
        assert not old.active
        assert new.supersedes_id == old_id
        assert new.insertion_order == old.insertion_order
        with pytest.raises(NotFoundError):
            temp_db.replace_rule(999, "X", "X", MatchType.EXACT, RuleTier.LOW, "1")
        with pytest.raises(NotFoundError):
            temp_db.deactivate_rule(999)

    def test_catalog_version_includes_global_revisions(self, temp_db, company_service):
        """Test that versions increase with company and global revisions."""
        first = company_service.create_company("First")
        second = company_service.create_company("Second")
        assert temp_db.get_catalog_version(first) == 0

        v1 = temp_db.record_catalog_revision(first, "first change")
        v2 = temp_db.record_catalog_revision(None, "global change")
        temp_db.record_catalog_revision(second, "other company")

        assert v2 > v1
        assert temp_db.get_catalog_version(first) == v2
        assert temp_db.get_catalog_version(second) > v2

    def test_rule_writes_carry_their_revision(self, temp_db, sample_company):
        """Test that a rule write and its catalog revision share one commit."""
        rule_id = temp_db.create_rule(
            sample_company.id,
            "Rent",
            "RENT",
            MatchType.CONTAINS,
            RuleTier.HIGH,
            "8200",
            revision_description="Added rule 'Rent'",
        )
        added = temp_db.get_catalog_version(sample_company.id)
        temp_db.deactivate_rule(rule_id, revision_description=f"Deactivated rule {rule_id}")

        assert added > 0
        assert temp_db.get_catalog_version(sample_company.id) > added

    def test_duplicate_rule_does_not_bump_version(self, temp_db, sample_company):
        """Test that a rejected rule leaves no catalog revision behind."""
        temp_db.create_rule(sample_company.id, "Rent", "RENT", MatchType.CONTAINS, RuleTier.HIGH, "8200")

        with pytest.raises(DuplicateDefinitionError):
            temp_db.create_rule(
                sample_company.id,
                "Rent",
                "RENT",
                MatchType.CONTAINS,
                RuleTier.LOW,
                "8300",
                revision_description="Added rule 'Rent'",
            )

        assert temp_db.get_catalog_version(sample_company.id) == 0

    def test_transaction_returns_domain_model(self, temp_db, sample_company):
        """Test that get_transaction returns a domain Transaction entity."""
        txn_id = temp_db.create_transaction(
            sample_company.id, date(2024, 5, 12), "SALARY", Decimal("100.00"), Direction.DEBIT, "REF"
        )

        transaction = temp_db.get_transaction(txn_id)

        assert isinstance(transaction, entities.Transaction)
        assert isinstance(transaction.amount, Decimal)
        assert transaction.amount == Decimal("100.00")
        assert transaction.direction == Direction.DEBIT
        assert isinstance(transaction.imported_at, datetime)
        assert temp_db.get_transaction(999) is None

    def test_latest_results_come_from_latest_run(self, temp_db, sample_company):
        """Test that a later run overrides results of earlier runs."""
        txn_id = temp_db.create_transaction(
            sample_company.id, date(2024, 5, 12), "RENT", Decimal("1"), Direction.DEBIT
        )
        rule_id = temp_db.create_rule(sample_company.id, "Rent", "RENT", MatchType.CONTAINS, RuleTier.HIGH, "8200")
        temp_db.save_classification_run(sample_company.id, 1, [ClassificationResult.unclassified(txn_id)])
        second = temp_db.save_classification_run(
            sample_company.id,
            2,
            [ClassificationResult(txn_id, rule_id, "8200", 0.85, RuleTier.HIGH)],
        )

        latest = temp_db.get_latest_results(sample_company.id)

        assert second.result_count == 1
        assert latest == {txn_id: ClassificationResult(txn_id, rule_id, "8200", 0.85, RuleTier.HIGH)}
        assert [run.catalog_version for run in temp_db.list_classification_runs(sample_company.id)] == [2, 1]
