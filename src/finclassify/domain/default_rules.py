"""Standard transaction mapping rules for a South African SME.

Every company's rule catalog is seeded from this table the first time it is
loaded. Targets are codes of the standard chart in ``chart_of_accounts``.

Tiers:
    critical: exact bank-generated counterparties that must win over keywords
    high: common payees and statutory payments
    medium: payroll-name and supplier-name heuristics
    low: generic keyword fallbacks (bank charges, interest, loans, insurance)
"""

from finclassify.domain.entities import MatchType, RuleDefinition, RuleTier

CRITICAL = RuleTier.CRITICAL
HIGH = RuleTier.HIGH
MEDIUM = RuleTier.MEDIUM
LOW = RuleTier.LOW

EXACT = MatchType.EXACT
CONTAINS = MatchType.CONTAINS
REGEX = MatchType.REGEX


def _rule(name: str, tier: RuleTier, match_type: MatchType, pattern: str, target: str) -> RuleDefinition:
    return RuleDefinition(
        pattern=pattern,
        match_type=match_type,
        tier=tier,
        target_account_code=target,
        name=name,
    )


# Order inside a tier is the insertion order of the seeded catalog
DEFAULT_RULES: tuple[RuleDefinition, ...] = (
    # critical
    _rule("Fee Immediate Payment", CRITICAL, CONTAINS, "FEE IMMEDIATE PAYMENT", "9600"),
    _rule("Balance Brought Forward", CRITICAL, EXACT, "BALANCE BROUGHT FORWARD", "5300"),
    _rule("SARS VAT Payments", CRITICAL, CONTAINS, "PAYMENT TO SARS-VAT", "9800"),
    _rule("PAYE Payments to SARS", CRITICAL, CONTAINS, "PAYE-PAY-AS-", "9820"),
    _rule("Excess Interest Expense", CRITICAL, CONTAINS, "EXCESS INTEREST", "9500"),
    _rule("Returned Debit Order", CRITICAL, REGEX, r"RTD-(DEBIT AGAINST PAYERS AUTH|NOT PROVIDED FOR) .*", "8800"),
    # high
    _rule("Pension Fund Contributions", HIGH, CONTAINS, "PENSION FUND CONTRIBUTION", "9900"),
    _rule("Vehicle Tracking - Cartrack", HIGH, CONTAINS, "CARTRACK", "8500"),
    _rule("Vehicle Tracking - Netstar", HIGH, CONTAINS, "NETSTAR", "8500"),
    _rule("Stanlib Investment", HIGH, CONTAINS, "STANLIB", "2200"),
    _rule("Bond Repayment", HIGH, REGEX, r".*\bBOND (REPAYMENT|PAYMENT|INSTAL?MENT)\b.*", "4000"),
    _rule("Telephone Expenses", HIGH, CONTAINS, "TELEPHONE", "8400"),
    _rule("OHS Training", HIGH, CONTAINS, "OHS TRAINING", "8730"),
    _rule("Salary Payments - XG SALARIES", HIGH, CONTAINS, "XG SALARIES", "8100"),
    _rule("Salary Payments - SALARIES", HIGH, CONTAINS, "SALARIES", "8100"),
    _rule("Salary Payments - WAGES", HIGH, CONTAINS, "WAGES", "8100"),
    _rule("Cash Withdrawals", HIGH, CONTAINS, "AUTOBANK CASH WITHDRAWAL", "1000"),
    # medium
    _rule("Immediate Payment - Generic Employee", MEDIUM, REGEX, r"IMMEDIATE PAYMENT \d+ [A-Z]+ [A-Z]+.*", "8100"),
    _rule("IB Payment To - Generic", MEDIUM, REGEX, r"IB PAYMENT TO [A-Z]+ [A-Z]+.*", "8100"),
    _rule("Instant Money to Employees", MEDIUM, CONTAINS, "IB INSTANT MONEY CASH TO", "8100"),
    _rule("Supplier Payment - Generic", MEDIUM, REGEX, r".*\b(SUPPLIERS?|TECHNOLOGIES|TRADING|PTY|CC)\b.*", "8710"),
    _rule("Director Reimbursements", MEDIUM, CONTAINS, "REIMBURSE", "4000"),
    _rule("Bank Transfers - IB TRANSFER TO", MEDIUM, CONTAINS, "IB TRANSFER TO", "1100-001"),
    _rule("Bank Transfers - IB TRANSFER FROM", MEDIUM, CONTAINS, "IB TRANSFER FROM", "1100-001"),
    _rule("Autobank Cash Deposit", MEDIUM, CONTAINS, "AUTOBANK CASH DEPOSIT", "1000"),
    _rule("Transport Expenses", MEDIUM, CONTAINS, "TRANSPORT", "8500"),
    _rule("Fuel Purchases", MEDIUM, REGEX, r".*\b(FUEL|PETROL|DIESEL|ENGEN|SASOL|SHELL|CALTEX)\b.*", "8500"),
    # low
    _rule("Bank Charges - SERVICE FEE", LOW, CONTAINS, "SERVICE FEE", "9600"),
    _rule("Bank Charges - FEE keyword", LOW, CONTAINS, "FEE", "9600"),
    _rule("Bank Charges - CHARGE keyword", LOW, CONTAINS, "CHARGE", "9600"),
    _rule("Interest Received", LOW, CONTAINS, "CREDIT INTEREST", "7000"),
    _rule("Interest Paid", LOW, CONTAINS, "INTEREST", "9500"),
    _rule("Loan Payments - Generic", LOW, CONTAINS, "LOAN", "4000"),
    _rule("Education Institutions - Generic", LOW, REGEX, r".*(COLLEGE|SCHOOL|UNIVERSITY).*", "9300"),
    _rule("Insurance Premiums - Generic", LOW, CONTAINS, "INSURANCE", "8800"),
    _rule("Insurance Premiums - PREMIUM keyword", LOW, CONTAINS, "PREMIUM", "8800"),
    _rule("Customer Payments - Generic", LOW, REGEX, r"(CREDIT TRANSFER|MAGTAPE CREDIT|DEPOSIT)\b.*", "6000"),
)
