"""Transaction classifier.

Matching is a pure function of a description and a catalog snapshot:

1. the description is trimmed, whitespace runs collapse to one space, and it
   is uppercased;
2. rules are tried in snapshot order (tier critical to low, then insertion
   order inside a tier);
3. the first matching rule wins and its tier fixes the confidence;
4. no match yields the unclassified result (confidence 0.0), never an error.
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from decimal import Decimal
from functools import lru_cache
from typing import Optional, Sequence, TYPE_CHECKING

from finclassify.domain.entities import (
    ClassificationResult,
    ClassificationRun,
    Direction,
    MappingRule,
    MatchType,
    RuleCatalogSnapshot,
    Transaction,
)
from finclassify.domain.errors import NotFoundError, ValidationError, company_not_found

if TYPE_CHECKING:
    from finclassify.database.base import Database
    from finclassify.domain.rule_catalog import RuleCatalogService

logger = logging.getLogger(__name__)


def normalize_description(text: Optional[str]) -> str:
    """Trim, collapse internal whitespace and uppercase a description."""
    return " ".join((text or "").split()).upper()


@lru_cache(maxsize=2048)
def compile_pattern(pattern: str) -> re.Pattern:
    """Compile a regex rule pattern (case-insensitive). Raises re.error if invalid."""
    return re.compile(pattern, re.IGNORECASE)


def rule_matches(rule: MappingRule, normalized: str) -> bool:
    """Check one rule against an already normalized description."""
    if rule.match_type == MatchType.EXACT:
        return normalized == normalize_description(rule.pattern)
    if rule.match_type == MatchType.CONTAINS:
        return normalize_description(rule.pattern) in normalized
    return compile_pattern(rule.pattern).fullmatch(normalized) is not None


def classify(
    description: Optional[str],
    amount: Optional[Decimal],
    direction: Optional[Direction],
    snapshot: RuleCatalogSnapshot,
    transaction_id: Optional[int] = None,
) -> ClassificationResult:
    """Classify one description against a catalog snapshot.

    Amount and direction do not influence matching.

    Args:
        description: Raw bank description
        amount: Transaction amount
        direction: Transaction direction
        snapshot: Catalog snapshot to match against
        transaction_id: Copied into the result

    Returns:
        The first matching rule's result, or the unclassified result
    """
    normalized = normalize_description(description)
    for rule in snapshot.rules:
        if rule_matches(rule, normalized):
            return ClassificationResult(
                transaction_id=transaction_id,
                matched_rule_id=rule.id,
                account_code=rule.target_account_code,
                confidence=rule.tier.confidence,
                tier=rule.tier,
            )
    return ClassificationResult.unclassified(transaction_id)


def classify_transaction(transaction: Transaction, snapshot: RuleCatalogSnapshot) -> ClassificationResult:
    """Classify a stored transaction against a catalog snapshot."""
    return classify(
        transaction.raw_description,
        transaction.amount,
        transaction.direction,
        snapshot,
        transaction_id=transaction.id,
    )


class ClassificationService:
    """Service for classifying batches of transactions and persisting the results."""

    def __init__(
        self,
        db: "Database",
        catalog: Optional["RuleCatalogService"] = None,
        max_workers: Optional[int] = None,
    ):
        """Initialize classification service.

        Args:
            db: Database instance
            catalog: Rule catalog service; a new one is created if omitted
            max_workers: Default thread count for bulk classification
                (None or 1 classifies sequentially)
        """
        self.db = db
        if catalog is None:
            from finclassify.domain.rule_catalog import RuleCatalogService

            catalog = RuleCatalogService(db)
        self.catalog = catalog
        self.max_workers = max_workers

    def classify_description(
        self,
        company_id: int,
        description: str,
        amount: Decimal = Decimal("0"),
        direction: Direction = Direction.DEBIT,
    ) -> ClassificationResult:
        """Classify a free-text description against the company's current catalog."""
        snapshot = self.catalog.load_catalog(company_id)
        return classify(description, amount, direction, snapshot)

    def bulk_classify(
        self,
        company_id: int,
        transactions: Sequence[Transaction],
        snapshot: Optional[RuleCatalogSnapshot] = None,
        max_workers: Optional[int] = None,
    ) -> list[ClassificationResult]:
        """Classify many transactions against one shared snapshot.

        Args:
            company_id: Company ID
            transactions: Transactions of that company
            snapshot: Snapshot to use; the current catalog is loaded if omitted
            max_workers: Thread count, overriding the service default

        Returns:
            One result per transaction, in input order

        Raises:
            NotFoundError: If the company does not exist
            ValidationError: If the snapshot or a transaction belongs to another company
        """
        if snapshot is None:
            snapshot = self.catalog.load_catalog(company_id)
        elif snapshot.company_id != company_id:
            raise ValidationError(
                f"Catalog snapshot belongs to company {snapshot.company_id}, not {company_id}"
            )

        for transaction in transactions:
            if transaction.company_id != company_id:
                raise ValidationError(
                    f"Transaction {transaction.id} belongs to company {transaction.company_id}, not {company_id}"
                )

        workers = max_workers if max_workers is not None else self.max_workers
        if workers is not None and workers > 1 and len(transactions) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                # map() yields in submission order
                results = list(executor.map(lambda t: classify_transaction(t, snapshot), transactions))
        else:
            results = [classify_transaction(t, snapshot) for t in transactions]

        classified = sum(1 for r in results if r.is_classified)
        logger.info(
            "Classified %d transactions for company %s against catalog version %s: %d matched, %d unclassified",
            len(results),
            company_id,
            snapshot.version,
            classified,
            len(results) - classified,
        )
        return results

    def classify_batch(
        self,
        company_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        max_workers: Optional[int] = None,
    ) -> ClassificationRun:
        """Classify a company's stored transactions and persist the results as one run.

        Args:
            company_id: Company ID
            start_date: Optional first transaction date (inclusive)
            end_date: Optional last transaction date (inclusive)
            max_workers: Thread count, overriding the service default

        Returns:
            The persisted classification run

        Raises:
            NotFoundError: If the company does not exist
            PersistenceFailureError: If the results could not be written; no
                result of the batch is stored
        """
        if not self.db.company_exists(company_id):
            raise NotFoundError(company_not_found(company_id))

        snapshot = self.catalog.load_catalog(company_id)
        transactions = self.db.list_transactions(company_id, start_date=start_date, end_date=end_date)
        results = self.bulk_classify(company_id, transactions, snapshot=snapshot, max_workers=max_workers)
        run = self.db.save_classification_run(company_id, snapshot.version, results)
        logger.info("Stored classification run %s for company %s (%d results)", run.id, company_id, run.result_count)
        return run

    def latest_results(
        self,
        company_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> dict[int, ClassificationResult]:
        """Latest stored result per transaction, keyed by transaction ID.

        Raises:
            NotFoundError: If the company does not exist
        """
        if not self.db.company_exists(company_id):
            raise NotFoundError(company_not_found(company_id))
        return self.db.get_latest_results(company_id, start_date=start_date, end_date=end_date)
