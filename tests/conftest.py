"""Shared pytest fixtures for finclassify tests."""

import tempfile
import os
import pytest

from finclassify.database.factories import create_sqlite_database
from finclassify.domain.chart_of_accounts import ChartOfAccountsService
from finclassify.domain.classifier import ClassificationService
from finclassify.domain.company import CompanyService
from finclassify.domain.pattern_analyzer import PatternAnalyzer
from finclassify.domain.rule_catalog import RuleCatalogService
from finclassify.domain.transaction import TransactionService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def company_service(temp_db):
    """Create a CompanyService with a temporary database."""
    return CompanyService(temp_db)


@pytest.fixture
def chart_service(temp_db):
    """Create a ChartOfAccountsService with a temporary database."""
    return ChartOfAccountsService(temp_db)


@pytest.fixture
def catalog_service(temp_db):
    """Create a RuleCatalogService seeded with the standard default rules."""
    return RuleCatalogService(temp_db)


@pytest.fixture
def empty_catalog_service(temp_db):
    """Create a RuleCatalogService that seeds no default rules."""
    return RuleCatalogService(temp_db, default_rules=())


@pytest.fixture
def classification_service(temp_db, empty_catalog_service):
    """Create a ClassificationService over an initially empty catalog."""
    return ClassificationService(temp_db, catalog=empty_catalog_service)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def analyzer(temp_db):
    """Create a PatternAnalyzer with a temporary database."""
    return PatternAnalyzer(temp_db)


@pytest.fixture
def sample_company(company_service):
    """Create a sample company without a chart of accounts."""
    company_id = company_service.create_company("Acme Logistics")
    return company_service.get_company(company_id)


@pytest.fixture
def bootstrapped_company(sample_company, chart_service):
    """Create a sample company with the standard chart of accounts."""
    chart_service.initialize_chart_of_accounts(sample_company.id)
    return sample_company


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
