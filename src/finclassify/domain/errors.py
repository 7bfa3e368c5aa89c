"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class InvalidPatternError(ValidationError):
    """A mapping rule pattern is malformed and cannot be published."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DuplicateDefinitionError(ConflictError):
    """An account, category or rule already exists under its unique key."""


class PersistenceFailureError(DomainError):
    """The store failed while writing; the write was rolled back."""

    def __init__(self, message: str, batch: Optional[str] = None):
        super().__init__(message)
        self.batch = batch


def company_not_found(company_id: int) -> str:
    """Return message for missing company."""
    return f"Company {company_id} not found"


def company_name_not_found(name: str) -> str:
    """Return message for missing company by name."""
    return f"Company '{name}' not found"


def account_code_not_found(company_id: int, code: str) -> str:
    """Return message for an account code missing from a company's chart."""
    return f"Account '{code}' not found for company {company_id}"


def category_not_found(company_id: int, name: str) -> str:
    """Return message for missing category by name."""
    return f"Category '{name}' not found for company {company_id}"


def rule_not_found(rule_id: int) -> str:
    """Return message for missing mapping rule."""
    return f"Rule {rule_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def duplicate_account_code(company_id: int, code: str) -> str:
    """Return message for an account code that already exists."""
    return f"Account '{code}' already exists for company {company_id}"


def duplicate_category_name(company_id: int, name: str) -> str:
    """Return message for a category name that already exists."""
    return f"Category '{name}' already exists for company {company_id}"


def invalid_regex(pattern: str, reason: str) -> str:
    """Return message for a regex rule pattern that does not compile."""
    return f"Invalid regex pattern '{pattern}': {reason}"


def batch_write_failed(batch: str, written: int, total: int) -> str:
    """Return message when a batch write fails and is rolled back."""
    return (
        f"Failed to persist classification batch {batch} "
        f"({written} of {total} results written before failure); batch rolled back"
    )


def catalog_change_failed(description: str) -> str:
    """Return message when a rule change and its catalog revision are rolled back."""
    return f"Failed to publish catalog change ({description}); nothing was changed"
