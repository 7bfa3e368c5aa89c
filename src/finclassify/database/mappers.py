"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, including the string-to-enum
conversions for columns stored as plain text.
"""

from finclassify.domain import entities as domain
from finclassify.database.models import (
    Company as ORMCompany,
    AccountCategory as ORMAccountCategory,
    Account as ORMAccount,
    MappingRule as ORMMappingRule,
    Transaction as ORMTransaction,
    ClassificationRun as ORMClassificationRun,
    ClassificationResult as ORMClassificationResult,
    AccountConfirmation as ORMAccountConfirmation,
)


def company_to_domain(orm_company: ORMCompany) -> domain.Company:
    """Convert SQLAlchemy Company model to domain Company entity."""
    return domain.Company(
        id=orm_company.id,
        name=orm_company.name,
        created_at=orm_company.created_at,
    )


def category_to_domain(orm_category: ORMAccountCategory) -> domain.AccountCategory:
    """Convert SQLAlchemy AccountCategory model to domain AccountCategory entity."""
    return domain.AccountCategory(
        id=orm_category.id,
        company_id=orm_category.company_id,
        name=orm_category.name,
        account_type=domain.AccountType(orm_category.account_type),
        normal_balance=domain.NormalBalance(orm_category.normal_balance),
        created_at=orm_category.created_at,
    )


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        company_id=orm_account.company_id,
        category_id=orm_account.category_id,
        code=orm_account.code,
        name=orm_account.name,
        account_type=domain.AccountType(orm_account.account_type),
        active=orm_account.active,
        created_at=orm_account.created_at,
    )


def rule_to_domain(orm_rule: ORMMappingRule) -> domain.MappingRule:
    """Convert SQLAlchemy MappingRule model to domain MappingRule entity."""
    return domain.MappingRule(
        id=orm_rule.id,
        company_id=orm_rule.company_id,
        name=orm_rule.name,
        pattern=orm_rule.pattern,
        match_type=domain.MatchType(orm_rule.match_type),
        tier=domain.RuleTier(orm_rule.tier),
        target_account_code=orm_rule.target_account_code,
        insertion_order=orm_rule.insertion_order,
        active=orm_rule.active,
        source=domain.RuleSource(orm_rule.source),
        created_at=orm_rule.created_at,
        supersedes_id=orm_rule.supersedes_id,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        company_id=orm_transaction.company_id,
        date=orm_transaction.date,
        raw_description=orm_transaction.raw_description,
        amount=orm_transaction.amount,
        direction=domain.Direction(orm_transaction.direction),
        reference=orm_transaction.reference,
        imported_at=orm_transaction.imported_at,
    )


def run_to_domain(orm_run: ORMClassificationRun) -> domain.ClassificationRun:
    """Convert SQLAlchemy ClassificationRun model to domain ClassificationRun entity."""
    return domain.ClassificationRun(
        id=orm_run.id,
        company_id=orm_run.company_id,
        catalog_version=orm_run.catalog_version,
        result_count=orm_run.result_count,
        created_at=orm_run.created_at,
    )


def result_to_domain(orm_result: ORMClassificationResult) -> domain.ClassificationResult:
    """Convert SQLAlchemy ClassificationResult model to domain ClassificationResult entity."""
    return domain.ClassificationResult(
        transaction_id=orm_result.transaction_id,
        matched_rule_id=orm_result.matched_rule_id,
        account_code=orm_result.account_code,
        confidence=orm_result.confidence,
        tier=domain.RuleTier(orm_result.tier) if orm_result.tier is not None else None,
    )


def result_to_orm(result: domain.ClassificationResult, run_id: int) -> ORMClassificationResult:
    """Convert a domain ClassificationResult to a new SQLAlchemy row for a run."""
    return ORMClassificationResult(
        run_id=run_id,
        transaction_id=result.transaction_id,
        matched_rule_id=result.matched_rule_id,
        account_code=result.account_code,
        confidence=result.confidence,
        tier=result.tier.value if result.tier is not None else None,
    )


def confirmation_to_domain(orm_confirmation: ORMAccountConfirmation) -> domain.AccountConfirmation:
    """Convert SQLAlchemy AccountConfirmation model to domain AccountConfirmation entity."""
    return domain.AccountConfirmation(
        transaction_id=orm_confirmation.transaction_id,
        account_code=orm_confirmation.account_code,
        confirmed_by=orm_confirmation.confirmed_by,
        confirmed_at=orm_confirmation.confirmed_at,
    )
