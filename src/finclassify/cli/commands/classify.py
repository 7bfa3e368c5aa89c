"""Classification commands."""

from decimal import Decimal

import click
from finclassify.cli.company_resolution import resolve_company_or_exit
from finclassify.cli.date_filters import date_range_options, resolve_cli_date_range
from finclassify.cli.error_handling import handle_domain_error
from finclassify.domain.classifier import ClassificationService
from finclassify.domain.errors import DomainError
from finclassify.domain.transaction import TransactionService, split_signed_amount
from finclassify.utils.amount_parser import parse_amount


@click.command("classify")
@click.argument("company", metavar="COMPANY")
@click.argument("description")
@click.option("--amount", default="0", help="Signed amount (negative is money out)")
@click.pass_context
def classify_description(ctx, company: str, description: str, amount: str):
    """Classify a single bank description against the current rule catalog.

    Nothing is stored.

    Examples:
        finclassify classify "Acme" "SALARY TRANSFER"
        finclassify classify 1 "XYZ BANK CHARGE 12/05" --amount -35.00
    """
    company_id = resolve_company_or_exit(ctx, company)
    service = ClassificationService(ctx.obj["db"])
    try:
        value, direction = split_signed_amount(parse_amount(amount))
        result = service.classify_description(company_id, description, value, direction)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)

    if not result.is_classified:
        click.echo("Unclassified (confidence 0.00)")
    else:
        click.echo(
            f"Account: {result.account_code} | Tier: {result.tier.value} | "
            f"Confidence: {result.confidence:.2f} | Rule: {result.matched_rule_id}"
        )
    if result.needs_review(ctx.obj["review_threshold"]):
        click.echo("Needs review: yes")
    else:
        click.echo("Needs review: no")


@click.command("classify-batch")
@click.argument("company", metavar="COMPANY")
@date_range_options
@click.option("--workers", type=click.IntRange(min=1), default=1, show_default=True, help="Classifier threads")
@click.pass_context
def classify_batch(
    ctx,
    company: str,
    start_date: str | None,
    end_date: str | None,
    periods: tuple[str, ...],
    workers: int,
):
    """Classify a company's stored transactions and store the results as one run.

    COMPANY can be a company name or ID. Either every result of the run is
    stored or none is.
    """
    company_id = resolve_company_or_exit(ctx, company)
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, periods=periods)
    db = ctx.obj["db"]
    service = ClassificationService(db)
    try:
        run = service.classify_batch(company_id, start_date=start, end_date=end, max_workers=workers)
        results = service.latest_results(company_id, start_date=start, end_date=end)
    except DomainError as e:
        handle_domain_error(ctx, e)

    threshold = ctx.obj["review_threshold"]
    classified = sum(1 for r in results.values() if r.is_classified)
    review = sum(1 for r in results.values() if r.needs_review(threshold))
    click.echo(f"Run {run.id} (catalog version {run.catalog_version}): {run.result_count} transactions")
    click.echo(f"  Classified: {classified}")
    click.echo(f"  Unclassified: {len(results) - classified}")
    click.echo(f"  Needs review (confidence < {threshold:.2f}): {review}")


@click.command("confirm")
@click.argument("transaction_id", type=int)
@click.argument("account_code")
@click.option("--by", "confirmed_by", help="Who confirmed the account")
@click.pass_context
def confirm_account(ctx, transaction_id: int, account_code: str, confirmed_by: str | None):
    """Record the account a person confirmed for a transaction.

    Confirmed accounts are what the analyzer bases its rule proposals on.
    """
    service = TransactionService(ctx.obj["db"])
    try:
        service.confirm_account(transaction_id, account_code, confirmed_by)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Transaction {transaction_id} confirmed as {account_code}")


def register_commands(cli):
    """Register classification commands with main CLI."""
    cli.add_command(classify_description)
    cli.add_command(classify_batch)
    cli.add_command(confirm_account)
