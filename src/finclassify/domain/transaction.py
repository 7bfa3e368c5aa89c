"""Transaction domain service."""

import logging
from typing import Optional, TYPE_CHECKING
from datetime import date
from decimal import Decimal

from finclassify.domain.entities import (
    AccountConfirmation,
    Direction,
    Transaction as TransactionEntity,
)
from finclassify.domain.errors import (
    NotFoundError,
    ValidationError,
    account_code_not_found,
    company_not_found,
    transaction_not_found,
)

if TYPE_CHECKING:
    from finclassify.database.base import Database

logger = logging.getLogger(__name__)


def parse_direction(value: str) -> Direction:
    """Parse a direction column value ("debit", "dr", "credit", "cr", ...).

    Raises:
        ValueError: If the value is not a recognized direction
    """
    normalized = value.strip().lower()
    if normalized in ("debit", "dr", "d", "out"):
        return Direction.DEBIT
    if normalized in ("credit", "cr", "c", "in"):
        return Direction.CREDIT
    raise ValueError(f"Unknown direction '{value}'")


def split_signed_amount(amount: Decimal) -> tuple[Decimal, Direction]:
    """Split a signed amount into its magnitude and direction (negative is a debit)."""
    if amount < 0:
        return (-amount, Direction.DEBIT)
    return (amount, Direction.CREDIT)


class TransactionService:
    """Service for storing imported transactions and their manual confirmations."""

    def __init__(self, db: "Database"):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_transaction(
        self,
        company_id: int,
        date: date,
        description: str,
        amount: Decimal,
        direction: Optional[Direction] = None,
        reference: Optional[str] = None,
    ) -> int:
        """Store an imported bank transaction.

        Args:
            company_id: Company ID
            date: Transaction date
            description: Raw bank description, stored unchanged
            amount: Amount; when direction is None the sign decides it
                (negative is a debit)
            direction: Optional explicit direction; amount must then be non-negative
            reference: Optional bank reference

        Returns:
            Transaction ID

        Raises:
            NotFoundError: If the company doesn't exist
            ValidationError: If a negative amount is given together with a direction
        """
        if not self.db.company_exists(company_id):
            raise NotFoundError(company_not_found(company_id))

        if direction is None:
            amount, direction = split_signed_amount(amount)
        elif amount < 0:
            raise ValidationError("Amount must not be negative when a direction is given")

        return self.db.create_transaction(
            company_id=company_id,
            date=date,
            raw_description=description or "",
            amount=amount,
            direction=direction,
            reference=reference,
        )

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID, or None if not found."""
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self,
        company_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[TransactionEntity]:
        """List a company's transactions ordered by date."""
        return self.db.list_transactions(company_id, start_date=start_date, end_date=end_date)

    def confirm_account(
        self, transaction_id: int, account_code: str, confirmed_by: Optional[str] = None
    ) -> None:
        """Record the account a person confirmed for a transaction.

        The latest confirmation of a transaction wins.

        Args:
            transaction_id: Transaction ID
            account_code: Code of an account in the company's chart
            confirmed_by: Optional name of whoever confirmed it

        Raises:
            NotFoundError: If the transaction or account doesn't exist
        """
        transaction = self.db.get_transaction(transaction_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if self.db.get_account_by_code(transaction.company_id, account_code) is None:
            raise NotFoundError(account_code_not_found(transaction.company_id, account_code))

        self.db.confirm_account(transaction_id, account_code, confirmed_by)
        logger.info("Transaction %s confirmed as %s", transaction_id, account_code)

    def get_confirmations(self, company_id: int) -> dict[int, AccountConfirmation]:
        """Latest confirmation per transaction of a company."""
        return self.db.get_confirmed_accounts(company_id)
