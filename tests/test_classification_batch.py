"""Tests for persisted classification runs."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from finclassify.database import sqlalchemy_db
from finclassify.domain.entities import MatchType, RuleDefinition, RuleTier
from finclassify.domain.errors import NotFoundError, PersistenceFailureError


def _add_rule(catalog, company_id, pattern, target, tier=RuleTier.MEDIUM):
    return catalog.add_rule(
        company_id,
        RuleDefinition(pattern=pattern, match_type=MatchType.CONTAINS, tier=tier, target_account_code=target),
    )


def _import(transaction_service, company_id, *descriptions, txn_date=date(2024, 5, 12)):
    return [
        transaction_service.create_transaction(company_id, txn_date, description, Decimal("-10.00"))
        for description in descriptions
    ]


def test_classify_batch_persists_run(
    temp_db, classification_service, empty_catalog_service, transaction_service, sample_company
):
    """Test that a batch stores one result per transaction."""
    _add_rule(empty_catalog_service, sample_company.id, "SALARY", "8100", RuleTier.CRITICAL)
    ids = _import(transaction_service, sample_company.id, "SALARY MAY", "COFFEE SHOP", "SALARY JUNE")

    run = classification_service.classify_batch(sample_company.id)

    assert run.result_count == 3
    assert run.catalog_version == empty_catalog_service.load_catalog(sample_company.id).version
    latest = classification_service.latest_results(sample_company.id)
    assert set(latest) == set(ids)
    assert latest[ids[0]].account_code == "8100"
    assert latest[ids[0]].confidence == 1.0
    assert latest[ids[1]].account_code is None
    assert latest[ids[1]].confidence == 0.0


def test_classify_batch_respects_date_range(
    classification_service, transaction_service, sample_company
):
    """Test that only transactions inside the range are classified."""
    _import(transaction_service, sample_company.id, "APRIL", txn_date=date(2024, 4, 30))
    may = _import(transaction_service, sample_company.id, "MAY", txn_date=date(2024, 5, 1))

    run = classification_service.classify_batch(
        sample_company.id, start_date=date(2024, 5, 1), end_date=date(2024, 5, 31)
    )

    assert run.result_count == 1
    assert list(classification_service.latest_results(sample_company.id)) == may


def test_later_run_supersedes_earlier_results(
    temp_db, classification_service, empty_catalog_service, transaction_service, sample_company
):
    """Test that reclassifying after a catalog change reports the new outcome."""
    (txn_id,) = _import(transaction_service, sample_company.id, "XYZ BANK CHARGE 12/05")
    first = classification_service.classify_batch(sample_company.id)
    assert classification_service.latest_results(sample_company.id)[txn_id].account_code is None

    _add_rule(empty_catalog_service, sample_company.id, "BANK CHARGE", "7200")
    second = classification_service.classify_batch(sample_company.id)

    latest = classification_service.latest_results(sample_company.id)[txn_id]
    assert latest.account_code == "7200"
    assert latest.confidence == 0.6
    assert second.catalog_version > first.catalog_version
    assert [run.id for run in temp_db.list_classification_runs(sample_company.id)] == [second.id, first.id]


def test_in_flight_snapshot_is_not_affected_by_publication(
    temp_db, classification_service, empty_catalog_service, transaction_service, sample_company
):
    """Test that a snapshot taken before a publication keeps its behavior."""
    _import(transaction_service, sample_company.id, "RENT MAY")
    snapshot = empty_catalog_service.load_catalog(sample_company.id)
    _add_rule(empty_catalog_service, sample_company.id, "RENT", "8200")
    transactions = temp_db.list_transactions(sample_company.id)

    old = classification_service.bulk_classify(sample_company.id, transactions, snapshot=snapshot)
    new = classification_service.bulk_classify(sample_company.id, transactions)

    assert old[0].account_code is None
    assert new[0].account_code == "8200"


def test_empty_batch(classification_service, sample_company):
    """Test classifying a company without transactions."""
    run = classification_service.classify_batch(sample_company.id)

    assert run.result_count == 0
    assert classification_service.latest_results(sample_company.id) == {}


def test_unknown_company(classification_service):
    """Test that classifying for a missing company fails."""
    with pytest.raises(NotFoundError, match="Company 999 not found"):
        classification_service.classify_batch(999)
    with pytest.raises(NotFoundError):
        classification_service.latest_results(999)


def test_failed_commit_rolls_back_batch(
    temp_db, classification_service, transaction_service, sample_company, monkeypatch
):
    """Test that a failed write leaves no partial batch behind."""
    _import(transaction_service, sample_company.id, "A", "B", "C")
    session = temp_db._get_session()
    original_commit = session.commit

    def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(session, "commit", failing_commit)

    with pytest.raises(PersistenceFailureError, match="rolled back") as exc_info:
        classification_service.classify_batch(sample_company.id)

    assert exc_info.value.batch == "company=1 catalog_version=0 size=3"
    monkeypatch.setattr(session, "commit", original_commit)
    assert temp_db.get_latest_results(sample_company.id) == {}
    assert temp_db.list_classification_runs(sample_company.id) == []


def test_failure_midway_through_batch(
    temp_db, classification_service, transaction_service, sample_company, monkeypatch
):
    """Test a failure after some chunks were already flushed."""
    monkeypatch.setattr(sqlalchemy_db, "RESULT_FLUSH_CHUNK", 2)
    _import(transaction_service, sample_company.id, "A", "B", "C", "D", "E")
    session = temp_db._get_session()
    original_flush = session.flush
    calls = []

    def flaky_flush(*args, **kwargs):
        # Autoflushes before queries have nothing pending and are not counted
        if session.new:
            calls.append(1)
            # First counted flush writes the run, the second one the first chunk
            if len(calls) == 3:
                raise OperationalError("INSERT", {}, Exception("database is locked"))
        return original_flush(*args, **kwargs)

    monkeypatch.setattr(session, "flush", flaky_flush)

    with pytest.raises(PersistenceFailureError, match="2 of 5 results written"):
        classification_service.classify_batch(sample_company.id)

    monkeypatch.setattr(session, "flush", original_flush)
    assert temp_db.get_latest_results(sample_company.id) == {}
    assert temp_db.list_classification_runs(sample_company.id) == []
