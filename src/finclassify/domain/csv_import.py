"""CSV import domain service."""

import csv
import logging
from typing import Any, TYPE_CHECKING
from pathlib import Path

from finclassify.domain.errors import NotFoundError, ValidationError, company_not_found
from finclassify.domain.transaction import TransactionService, parse_direction
from finclassify.utils.amount_parser import parse_amount
from finclassify.utils.date_parser import parse_date

if TYPE_CHECKING:
    from finclassify.database.base import Database

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("date", "description", "amount")


class CSVImportService:
    """Service for importing bank statement CSV files."""

    def __init__(self, db: "Database"):
        """Initialize CSV import service.

        Args:
            db: Database instance
        """
        self.db = db
        self.transaction_service = TransactionService(db)

    def import_csv(self, company_id: int, csv_file_path: str) -> dict[str, Any]:
        """Import transactions from a CSV file.

        Column names are matched case-insensitively. Required columns are
        date, description and amount; direction and reference are optional.
        Without a direction column a negative amount is a debit.

        Args:
            company_id: Company ID
            csv_file_path: Path to CSV file

        Returns:
            Dict with import statistics:
            - imported: number of transactions imported
            - errors: list of error messages for rows that were skipped

        Raises:
            NotFoundError: If the company doesn't exist
            ValidationError: If the file has no header or misses required columns
            FileNotFoundError: If CSV file doesn't exist
        """
        if not self.db.company_exists(company_id):
            raise NotFoundError(company_not_found(company_id))

        csv_path = Path(csv_file_path)
        if not csv_path.exists():
            raise FileNotFoundError(f"CSV file not found: {csv_file_path}")

        imported = 0
        errors: list[str] = []

        with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
            sample = f.read(2048)
            f.seek(0)
            try:
                delimiter = csv.Sniffer().sniff(sample, delimiters=",;\t|").delimiter
            except csv.Error:
                delimiter = ","

            reader = csv.DictReader(f, delimiter=delimiter)
            if not reader.fieldnames:
                raise ValidationError("CSV file has no columns")

            columns = {name.strip().lower(): name for name in reader.fieldnames if name}
            missing = [col for col in REQUIRED_COLUMNS if col not in columns]
            if missing:
                raise ValidationError(f"CSV file missing required columns: {', '.join(missing)}")

            def value(row: dict[str, Any], column: str) -> str:
                source = columns.get(column)
                raw = row.get(source) if source else None
                return raw.strip() if raw else ""

            for row_num, row in enumerate(reader, start=2):  # header is row 1
                date_str = value(row, "date")
                amount_str = value(row, "amount")
                if not date_str:
                    errors.append(f"Row {row_num}: Missing date")
                    continue
                if not amount_str:
                    errors.append(f"Row {row_num}: Missing amount")
                    continue

                try:
                    txn_date = parse_date(date_str)
                    amount = parse_amount(amount_str)
                    direction_str = value(row, "direction")
                    direction = parse_direction(direction_str) if direction_str else None
                    if direction is not None:
                        amount = abs(amount)
                    self.transaction_service.create_transaction(
                        company_id=company_id,
                        date=txn_date,
                        description=value(row, "description"),
                        amount=amount,
                        direction=direction,
                        reference=value(row, "reference") or None,
                    )
                except ValueError as e:
                    errors.append(f"Row {row_num}: {e}")
                    continue
                imported += 1

        logger.info(
            "Imported %d transactions for company %s from %s (%d rows skipped)",
            imported,
            company_id,
            csv_path.name,
            len(errors),
        )
        return {"imported": imported, "errors": errors}
