"""Chart of accounts commands."""

import click
from finclassify.cli.company_resolution import resolve_company_or_exit
from finclassify.cli.error_handling import handle_domain_error
from finclassify.domain.chart_of_accounts import ChartOfAccountsService
from finclassify.domain.errors import DomainError


@click.command("init-accounts")
@click.argument("company", metavar="COMPANY")
@click.pass_context
def init_accounts(ctx, company: str):
    """Create the standard chart of accounts for a company.

    COMPANY can be a company name or ID. Running it again is safe: existing
    categories and accounts are kept and nothing is duplicated.

    Examples:
        finclassify init-accounts "Acme Logistics"
    """
    company_id = resolve_company_or_exit(ctx, company)
    service = ChartOfAccountsService(ctx.obj["db"])
    try:
        categories = service.initialize_chart_of_accounts(company_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    accounts = service.list_accounts(company_id)
    click.echo(f"Chart of accounts ready: {len(categories)} categories, {len(accounts)} accounts")


@click.command("accounts")
@click.argument("company", metavar="COMPANY")
@click.option("--category", help="Only show accounts of this category")
@click.pass_context
def list_accounts(ctx, company: str, category: str | None):
    """List a company's chart of accounts.

    COMPANY can be a company name or ID.
    """
    company_id = resolve_company_or_exit(ctx, company)
    service = ChartOfAccountsService(ctx.obj["db"])
    try:
        categories = {c.id: c for c in service.list_categories(company_id)}
        accounts = service.list_accounts(company_id, category_name=category)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not accounts:
        click.echo("No accounts found. Run 'finclassify init-accounts' first.")
        return

    click.echo(f"\n{'Code':<10} {'Account':<32} {'Type':<10} Category")
    click.echo("-" * 80)
    for account in accounts:
        category_name = categories[account.category_id].name if account.category_id in categories else ""
        click.echo(f"{account.code:<10} {account.name:<32} {account.account_type.value:<10} {category_name}")


def register_commands(cli):
    """Register chart of accounts commands with main CLI."""
    cli.add_command(init_accounts)
    cli.add_command(list_accounts)
