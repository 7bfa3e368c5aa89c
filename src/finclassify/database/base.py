"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Sequence
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from finclassify.domain.entities import (
    Company,
    AccountCategory,
    Account,
    AccountType,
    NormalBalance,
    MappingRule,
    MatchType,
    RuleTier,
    RuleSource,
    Transaction,
    Direction,
    ClassificationResult,
    ClassificationRun,
    AccountConfirmation,
)


class Database(ABC):
    """Abstract database interface for finclassify."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Company registry
    @abstractmethod
    def create_company(self, name: str) -> int:
        """Create a company. Returns company ID."""
        pass

    @abstractmethod
    def get_company(self, company_id: int) -> Optional[Company]:
        """Get company by ID."""
        pass

    @abstractmethod
    def get_company_by_name(self, name: str) -> Optional[Company]:
        """Get company by name."""
        pass

    @abstractmethod
    def company_exists(self, company_id: int) -> bool:
        """Check if a company exists."""
        pass

    @abstractmethod
    def list_companies(self) -> list[Company]:
        """List all companies."""
        pass

    # Account/category store
    @abstractmethod
    def create_category(
        self,
        company_id: int,
        name: str,
        account_type: AccountType,
        normal_balance: NormalBalance,
    ) -> int:
        """Create a category. Returns category ID.

        Raises:
            DuplicateDefinitionError: If the company already has a category with this name
        """
        pass

    @abstractmethod
    def get_category_by_name(self, company_id: int, name: str) -> Optional[AccountCategory]:
        """Get a company's category by name."""
        pass

    @abstractmethod
    def list_categories(self, company_id: int) -> list[AccountCategory]:
        """List a company's categories."""
        pass

    @abstractmethod
    def create_account(
        self,
        company_id: int,
        category_id: int,
        code: str,
        name: str,
        account_type: AccountType,
    ) -> int:
        """Create an account. Returns account ID.

        Raises:
            DuplicateDefinitionError: If the company already has an account with this code
        """
        pass

    @abstractmethod
    def get_account_by_code(self, company_id: int, code: str) -> Optional[Account]:
        """Get a company's account by code."""
        pass

    @abstractmethod
    def list_accounts(self, company_id: int, category_id: Optional[int] = None) -> list[Account]:
        """List a company's accounts, optionally filtered by category."""
        pass

    # Rule store
    @abstractmethod
    def create_rule(
        self,
        company_id: Optional[int],
        name: str,
        pattern: str,
        match_type: MatchType,
        tier: RuleTier,
        target_account_code: str,
        source: RuleSource = RuleSource.CUSTOM,
        insertion_order: Optional[int] = None,
        supersedes_id: Optional[int] = None,
        revision_description: Optional[str] = None,
    ) -> int:
        """Append a rule record. Returns rule ID.

        When insertion_order is None the next value of the rules sequence is used.
        When revision_description is given, a catalog revision is recorded in the
        same transaction as the rule.

        Raises:
            DuplicateDefinitionError: If the rule name already exists for the company
            PersistenceFailureError: If the write fails; nothing is stored
        """
        pass

    @abstractmethod
    def create_rules(
        self,
        company_id: Optional[int],
        rules: Sequence[tuple[str, str, MatchType, RuleTier, str]],
        source: RuleSource = RuleSource.DEFAULT,
        revision_description: Optional[str] = None,
    ) -> int:
        """Append several (name, pattern, match_type, tier, target) rules atomically.

        Returns the number of rules created. The optional catalog revision is part
        of the same transaction.

        Raises:
            DuplicateDefinitionError: If any rule name already exists for the company
            PersistenceFailureError: If the write fails; nothing is stored
        """
        pass

    @abstractmethod
    def get_rule(self, rule_id: int) -> Optional[MappingRule]:
        """Get rule by ID."""
        pass

    @abstractmethod
    def list_rules(
        self,
        company_id: Optional[int],
        include_inactive: bool = False,
        include_global: bool = False,
    ) -> list[MappingRule]:
        """List rules of a company (company_id=None lists global rules only)."""
        pass

    @abstractmethod
    def count_rules(self, company_id: Optional[int]) -> int:
        """Count all rule records (active or not) of a company."""
        pass

    @abstractmethod
    def deactivate_rule(self, rule_id: int, revision_description: Optional[str] = None) -> None:
        """Mark a rule inactive, recording the optional catalog revision with it."""
        pass

    @abstractmethod
    def replace_rule(
        self,
        rule_id: int,
        name: str,
        pattern: str,
        match_type: MatchType,
        tier: RuleTier,
        target_account_code: str,
        revision_description: Optional[str] = None,
    ) -> int:
        """Deactivate a rule and append its successor in one transaction.

        The successor keeps the insertion order of the rule it supersedes.
        Returns the new rule ID.
        """
        pass

    @abstractmethod
    def record_catalog_revision(self, company_id: Optional[int], description: str) -> int:
        """Record a published catalog change. Returns the new version number."""
        pass

    @abstractmethod
    def get_catalog_version(self, company_id: int) -> int:
        """Current catalog version for a company (includes global revisions)."""
        pass

    # Transaction store
    @abstractmethod
    def create_transaction(
        self,
        company_id: int,
        date: date,
        raw_description: str,
        amount: Decimal,
        direction: Direction,
        reference: Optional[str] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        company_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Transaction]:
        """List a company's transactions ordered by date, then ID."""
        pass

    @abstractmethod
    def save_classification_run(
        self,
        company_id: int,
        catalog_version: int,
        results: Sequence[ClassificationResult],
    ) -> ClassificationRun:
        """Persist a batch of results as one run, all or nothing.

        Raises:
            PersistenceFailureError: If the write fails; nothing of the batch is kept
        """
        pass

    @abstractmethod
    def get_latest_results(
        self,
        company_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> dict[int, ClassificationResult]:
        """Latest result per transaction, keyed by transaction ID."""
        pass

    @abstractmethod
    def list_classification_runs(self, company_id: int) -> list[ClassificationRun]:
        """List a company's classification runs, newest first."""
        pass

    @abstractmethod
    def confirm_account(
        self, transaction_id: int, account_code: str, confirmed_by: Optional[str] = None
    ) -> None:
        """Record a manually confirmed account for a transaction."""
        pass

    @abstractmethod
    def get_confirmed_accounts(self, company_id: int) -> dict[int, AccountConfirmation]:
        """Latest manual confirmation per transaction, keyed by transaction ID."""
        pass
