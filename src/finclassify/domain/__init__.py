"""Domain layer for finclassify."""

from finclassify.domain.company import CompanyService
from finclassify.domain.chart_of_accounts import ChartOfAccountsService
from finclassify.domain.rule_catalog import RuleCatalogService
from finclassify.domain.classifier import ClassificationService
from finclassify.domain.pattern_analyzer import PatternAnalyzer
from finclassify.domain.transaction import TransactionService
from finclassify.domain.csv_import import CSVImportService

__all__ = [
    "CompanyService",
    "ChartOfAccountsService",
    "RuleCatalogService",
    "ClassificationService",
    "PatternAnalyzer",
    "TransactionService",
    "CSVImportService",
]
