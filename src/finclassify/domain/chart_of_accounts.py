"""Chart-of-accounts bootstrapping service."""

import logging
from typing import Optional, TYPE_CHECKING

from finclassify.domain.entities import (
    Account,
    AccountCategory,
    AccountType,
    NormalBalance,
)
from finclassify.domain.errors import (
    DuplicateDefinitionError,
    NotFoundError,
    account_code_not_found,
    category_not_found,
    company_not_found,
)

if TYPE_CHECKING:
    from finclassify.database.base import Database

logger = logging.getLogger(__name__)

# (name, account type, normal balance)
STANDARD_CATEGORIES: tuple[tuple[str, AccountType, NormalBalance], ...] = (
    ("Current Assets", AccountType.ASSET, NormalBalance.DEBIT),
    ("Non-Current Assets", AccountType.ASSET, NormalBalance.DEBIT),
    ("Current Liabilities", AccountType.LIABILITY, NormalBalance.CREDIT),
    ("Non-Current Liabilities", AccountType.LIABILITY, NormalBalance.CREDIT),
    ("Owner's Equity", AccountType.EQUITY, NormalBalance.CREDIT),
    ("Operating Revenue", AccountType.REVENUE, NormalBalance.CREDIT),
    ("Other Income", AccountType.REVENUE, NormalBalance.CREDIT),
    ("Operating Expenses", AccountType.EXPENSE, NormalBalance.DEBIT),
    ("Administrative Expenses", AccountType.EXPENSE, NormalBalance.DEBIT),
    ("Finance Costs", AccountType.EXPENSE, NormalBalance.DEBIT),
)

# (code, name, category name)
STANDARD_ACCOUNTS: tuple[tuple[str, str, str], ...] = (
    ("1000", "Petty Cash", "Current Assets"),
    ("1100", "Bank - Current Account", "Current Assets"),
    ("1100-001", "Bank Transfers", "Current Assets"),
    ("1101", "Bank - Savings Account", "Current Assets"),
    ("1102", "Bank - Call Account", "Current Assets"),
    ("1200", "Accounts Receivable", "Current Assets"),
    ("1300", "Inventory", "Current Assets"),
    ("1400", "Prepaid Expenses", "Current Assets"),
    ("1500", "VAT Input", "Current Assets"),
    ("2000", "Property, Plant & Equipment", "Non-Current Assets"),
    ("2100", "Accumulated Depreciation", "Non-Current Assets"),
    ("2200", "Investments", "Non-Current Assets"),
    ("3000", "Accounts Payable", "Current Liabilities"),
    ("3100", "VAT Output", "Current Liabilities"),
    ("3200", "PAYE Payable", "Current Liabilities"),
    ("3300", "UIF Payable", "Current Liabilities"),
    ("3400", "SDL Payable", "Current Liabilities"),
    ("3500", "Accrued Expenses", "Current Liabilities"),
    ("4000", "Long-term Loans", "Non-Current Liabilities"),
    ("5000", "Share Capital", "Owner's Equity"),
    ("5100", "Retained Earnings", "Owner's Equity"),
    ("5200", "Current Year Earnings", "Owner's Equity"),
    ("5300", "Opening Balance Equity", "Owner's Equity"),
    ("6000", "Sales Revenue", "Operating Revenue"),
    ("6100", "Service Revenue", "Operating Revenue"),
    ("6200", "Other Operating Revenue", "Operating Revenue"),
    ("7000", "Interest Income", "Other Income"),
    ("7100", "Dividend Income", "Other Income"),
    ("7200", "Gain on Asset Disposal", "Other Income"),
    ("8000", "Cost of Goods Sold", "Operating Expenses"),
    ("8100", "Employee Costs", "Operating Expenses"),
    ("8100-001", "Director Remuneration", "Operating Expenses"),
    ("8200", "Rent Expense", "Operating Expenses"),
    ("8300", "Utilities", "Operating Expenses"),
    ("8400", "Communication", "Operating Expenses"),
    ("8500", "Motor Vehicle Expenses", "Operating Expenses"),
    ("8600", "Travel & Entertainment", "Operating Expenses"),
    ("8700", "Professional Services", "Operating Expenses"),
    ("8710", "Suppliers Expense", "Operating Expenses"),
    ("8720", "HR Management", "Operating Expenses"),
    ("8730", "Education & Training", "Operating Expenses"),
    ("8800", "Insurance", "Operating Expenses"),
    ("8900", "Repairs & Maintenance", "Operating Expenses"),
    ("9000", "Office Supplies", "Administrative Expenses"),
    ("9100", "Computer Expenses", "Administrative Expenses"),
    ("9200", "Marketing & Advertising", "Administrative Expenses"),
    ("9300", "Training & Development", "Administrative Expenses"),
    ("9400", "Depreciation", "Administrative Expenses"),
    ("9500", "Interest Expense", "Finance Costs"),
    ("9600", "Bank Charges", "Finance Costs"),
    ("9700", "Foreign Exchange Loss", "Finance Costs"),
    ("9800", "VAT Payments to SARS", "Finance Costs"),
    ("9810", "Loan Repayments", "Finance Costs"),
    ("9820", "PAYE Expense", "Finance Costs"),
    ("9900", "Pension Expenses", "Finance Costs"),
)


class ChartOfAccountsService:
    """Service for bootstrapping and reading a company's chart of accounts."""

    def __init__(self, db: "Database"):
        """Initialize chart of accounts service.

        Args:
            db: Database instance
        """
        self.db = db

    def initialize_chart_of_accounts(self, company_id: int) -> dict[str, int]:
        """Create the standard categories and accounts for a company.

        Safe to call any number of times, including concurrently for the same
        company: an insert that collides with an existing row is treated as
        "already exists" and the existing row is used.

        Args:
            company_id: Company ID

        Returns:
            Mapping of category name to category ID (identical on every call)

        Raises:
            NotFoundError: If the company does not exist
        """
        if not self.db.company_exists(company_id):
            raise NotFoundError(company_not_found(company_id))

        category_ids: dict[str, int] = {}
        account_types: dict[str, AccountType] = {}
        created_categories = 0
        for name, account_type, normal_balance in STANDARD_CATEGORIES:
            category_id, created = self._ensure_category(company_id, name, account_type, normal_balance)
            category_ids[name] = category_id
            account_types[name] = account_type
            created_categories += int(created)

        created_accounts = 0
        for code, name, category_name in STANDARD_ACCOUNTS:
            created = self._ensure_account(
                company_id, category_ids[category_name], code, name, account_types[category_name]
            )
            created_accounts += int(created)

        logger.info(
            "Chart of accounts for company %s: %d categories and %d accounts created",
            company_id,
            created_categories,
            created_accounts,
        )
        return category_ids

    def _ensure_category(
        self,
        company_id: int,
        name: str,
        account_type: AccountType,
        normal_balance: NormalBalance,
    ) -> tuple[int, bool]:
        existing = self.db.get_category_by_name(company_id, name)
        if existing is not None:
            return (existing.id, False)
        try:
            return (self.db.create_category(company_id, name, account_type, normal_balance), True)
        except DuplicateDefinitionError:
            # Lost a race with another bootstrap of the same company
            logger.warning("Category '%s' for company %s created concurrently", name, company_id)
            existing = self.db.get_category_by_name(company_id, name)
            if existing is None:
                raise
            return (existing.id, False)

    def _ensure_account(
        self,
        company_id: int,
        category_id: int,
        code: str,
        name: str,
        account_type: AccountType,
    ) -> bool:
        if self.db.get_account_by_code(company_id, code) is not None:
            logger.debug("Account %s for company %s already exists", code, company_id)
            return False
        try:
            self.db.create_account(company_id, category_id, code, name, account_type)
        except DuplicateDefinitionError:
            logger.warning("Account %s for company %s created concurrently", code, company_id)
            if self.db.get_account_by_code(company_id, code) is None:
                raise
            return False
        return True

    def has_chart(self, company_id: int) -> bool:
        """Check whether a company has any accounts."""
        return len(self.db.list_accounts(company_id)) > 0

    def list_categories(self, company_id: int) -> list[AccountCategory]:
        """List a company's categories.

        Raises:
            NotFoundError: If the company does not exist
        """
        if not self.db.company_exists(company_id):
            raise NotFoundError(company_not_found(company_id))
        return self.db.list_categories(company_id)

    def list_accounts(self, company_id: int, category_name: Optional[str] = None) -> list[Account]:
        """List a company's accounts, optionally restricted to one category.

        Raises:
            NotFoundError: If the company or the named category does not exist
        """
        if not self.db.company_exists(company_id):
            raise NotFoundError(company_not_found(company_id))
        if category_name is None:
            return self.db.list_accounts(company_id)
        category = self.db.get_category_by_name(company_id, category_name)
        if category is None:
            raise NotFoundError(category_not_found(company_id, category_name))
        return self.db.list_accounts(company_id, category_id=category.id)

    def get_account_by_code(self, company_id: int, code: str) -> Account:
        """Get an account by code.

        Raises:
            NotFoundError: If the account does not exist
        """
        account = self.db.get_account_by_code(company_id, code)
        if account is None:
            raise NotFoundError(account_code_not_found(company_id, code))
        return account
