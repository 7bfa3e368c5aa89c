"""Tests that every layer can be imported on its own."""

import subprocess
import sys

import pytest

from finclassify import domain
from finclassify.domain.rule_catalog import RuleCatalogService


@pytest.mark.parametrize(
    "module",
    [
        "finclassify.database",
        "finclassify.database.sqlalchemy_db",
        "finclassify.domain",
        "finclassify.domain.entities",
        "finclassify.utils",
        "finclassify.utils.amount_parser",
        "finclassify.cli.main",
    ],
)
def test_module_imports_first(module):
    """Test that import order between the layers does not matter."""
    result = subprocess.run(
        [sys.executable, "-c", f"import {module}"],
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0, result.stderr


def test_domain_exports_services():
    assert domain.RuleCatalogService is RuleCatalogService
    assert set(domain.__all__) == {
        "CompanyService",
        "ChartOfAccountsService",
        "RuleCatalogService",
        "ClassificationService",
        "PatternAnalyzer",
        "TransactionService",
        "CSVImportService",
    }
