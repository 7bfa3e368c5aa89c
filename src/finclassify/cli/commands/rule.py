"""Mapping rule commands."""

import click
from finclassify.cli.company_resolution import resolve_company_or_exit
from finclassify.cli.error_handling import handle_domain_error
from finclassify.domain.entities import MatchType, RuleDefinition, RuleTier
from finclassify.domain.errors import DomainError
from finclassify.domain.rule_catalog import RuleCatalogService


@click.group()
def rule_group():
    """Manage mapping rules."""
    pass


@rule_group.command("list")
@click.argument("company", metavar="COMPANY")
@click.option("--all", "include_inactive", is_flag=True, help="Include deactivated and superseded rules")
@click.pass_context
def list_rules(ctx, company: str, include_inactive: bool):
    """List the rules of a company's catalog in matching order.

    COMPANY can be a company name or ID.
    """
    company_id = resolve_company_or_exit(ctx, company)
    service = RuleCatalogService(ctx.obj["db"])
    try:
        # Make sure the defaults are seeded before listing
        snapshot = service.load_catalog(company_id)
        rules = service.list_rules(company_id, include_inactive=include_inactive)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not rules:
        click.echo("No rules found.")
        return

    rules.sort(key=lambda r: r.sort_key)
    click.echo(f"\nRule catalog version {snapshot.version}:")
    click.echo("-" * 100)
    for r in rules:
        scope = "global" if r.is_global else r.source.value
        status = "" if r.active else " [inactive]"
        click.echo(
            f"ID: {r.id:4d} | {r.tier.value:<8} | {r.match_type.value:<8} | {r.pattern[:40]:<40} "
            f"-> {r.target_account_code:<9} | {scope}{status}"
        )


@rule_group.command("add")
@click.argument("company", metavar="COMPANY")
@click.argument("pattern")
@click.argument("account_code")
@click.option(
    "--match-type",
    type=click.Choice([m.value for m in MatchType]),
    default=MatchType.CONTAINS.value,
    show_default=True,
    help="How the pattern is compared with descriptions",
)
@click.option(
    "--tier",
    type=click.Choice([t.value for t in RuleTier]),
    default=RuleTier.MEDIUM.value,
    show_default=True,
    help="Priority band of the rule",
)
@click.option("--name", help="Rule name (generated if omitted)")
@click.option("--global", "is_global", is_flag=True, help="Publish the rule for every company")
@click.pass_context
def add_rule(
    ctx,
    company: str,
    pattern: str,
    account_code: str,
    match_type: str,
    tier: str,
    name: str | None,
    is_global: bool,
):
    """Publish a mapping rule.

    COMPANY can be a company name or ID.

    Examples:
        finclassify rule add "Acme" "SALARY TRANSFER" 8100 --match-type exact --tier critical
        finclassify rule add "Acme" "BANK CHARGE" 9600
        finclassify rule add "Acme" "POS PURCHASE .* ENGEN.*" 8500 --match-type regex --tier high
    """
    company_id = resolve_company_or_exit(ctx, company)
    service = RuleCatalogService(ctx.obj["db"])
    definition = RuleDefinition(
        pattern=pattern,
        match_type=MatchType(match_type),
        tier=RuleTier(tier),
        target_account_code=account_code,
        name=name,
    )
    try:
        rule = service.add_rule(None if is_global else company_id, definition)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added rule {rule.id}: {rule.tier.value} {rule.match_type.value} '{rule.pattern}' -> {rule.target_account_code}")


@rule_group.command("deactivate")
@click.argument("company", metavar="COMPANY")
@click.argument("rule_id", type=int)
@click.option("--global", "is_global", is_flag=True, help="The rule is a global rule")
@click.pass_context
def deactivate_rule(ctx, company: str, rule_id: int, is_global: bool):
    """Deactivate a rule. Rules are kept for audit and never deleted."""
    company_id = resolve_company_or_exit(ctx, company)
    service = RuleCatalogService(ctx.obj["db"])
    try:
        service.deactivate_rule(None if is_global else company_id, rule_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deactivated rule {rule_id}")


def register_commands(cli):
    """Register rule commands with main CLI."""
    cli.add_command(rule_group, name="rule")
