"""Pattern analysis commands."""

import click
from finclassify.cli.company_resolution import resolve_company_or_exit
from finclassify.cli.date_filters import date_range_options, resolve_cli_date_range
from finclassify.cli.error_handling import handle_domain_error
from finclassify.domain.entities import PatternGroup, TIER_ORDER
from finclassify.domain.errors import DomainError
from finclassify.domain.pattern_analyzer import DEFAULT_ANALYSIS_THRESHOLD, PatternAnalyzer


def _echo_groups(groups: tuple[PatternGroup, ...]) -> None:
    for group in groups:
        click.echo(f"  {group.count:5d} x {group.key}")
        click.echo(f"          {group.suggested_action}")


@click.command("analyze")
@click.argument("company", metavar="COMPANY")
@date_range_options
@click.option(
    "--threshold",
    type=click.FloatRange(0.0, 1.0),
    default=DEFAULT_ANALYSIS_THRESHOLD,
    show_default=True,
    help="Report transactions classified below this confidence",
)
@click.option("--top", "top_n", type=click.IntRange(min=1), help="Only show the N largest groups")
@click.pass_context
def analyze(
    ctx,
    company: str,
    start_date: str | None,
    end_date: str | None,
    periods: tuple[str, ...],
    threshold: float,
    top_n: int | None,
):
    """Find low-confidence and unmatched description patterns.

    COMPANY can be a company name or ID. Proposals are only printed; apply
    them with 'finclassify rule add'.
    """
    company_id = resolve_company_or_exit(ctx, company)
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, periods=periods)
    analyzer = PatternAnalyzer(ctx.obj["db"])
    try:
        report = analyzer.analyze(company_id, start_date=start, end_date=end, threshold=threshold, top_n=top_n)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(
        f"Scanned {report.scanned} transactions: {report.below_threshold} below confidence {report.threshold:.2f}"
    )
    if not report.groups:
        click.echo("No patterns to review.")
        return
    click.echo("\nPatterns:")
    _echo_groups(report.groups)


@click.command("report")
@click.argument("company", metavar="COMPANY")
@click.option("--top", "top_n", type=click.IntRange(min=1), default=10, show_default=True, help="Unmatched groups to show")
@click.pass_context
def classification_report(ctx, company: str, top_n: int):
    """Summarize classification coverage of a company.

    COMPANY can be a company name or ID.
    """
    company_id = resolve_company_or_exit(ctx, company)
    analyzer = PatternAnalyzer(ctx.obj["db"])
    try:
        report = analyzer.generate_classification_report(company_id, top_n=top_n)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Total transactions: {report.total_transactions}")
    percentages = report.tier_percentages
    for tier in TIER_ORDER:
        click.echo(f"  {tier.value:<10} {report.tier_counts.get(tier, 0):6d}  {percentages[tier]:6.1f}%")
    click.echo(f"  {'unclassified':<10} {report.unclassified_count:6d}  {report.unclassified_percentage:6.1f}%")
    if report.top_unmatched:
        click.echo("\nTop unmatched patterns:")
        _echo_groups(report.top_unmatched)


def register_commands(cli):
    """Register analysis commands with main CLI."""
    cli.add_command(analyze)
    cli.add_command(classification_report)
