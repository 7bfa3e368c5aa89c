"""Main CLI entry point."""

import logging

import click
from finclassify.database.factories import create_sqlite_database
from finclassify.domain.entities import DEFAULT_REVIEW_THRESHOLD

# Import and register all commands at module level
from finclassify.cli.commands import (
    company,
    chart,
    rule,
    import_cmd,
    classify,
    analyze,
)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FINCLASSIFY_DB_PATH environment variable)",
    envvar="FINCLASSIFY_DB_PATH",
)
@click.option(
    "--review-threshold",
    type=click.FloatRange(0.0, 1.0),
    default=DEFAULT_REVIEW_THRESHOLD,
    show_default=True,
    envvar="FINCLASSIFY_REVIEW_THRESHOLD",
    help="Confidence below which a classification is flagged for manual review",
)
@click.option("--verbose", "-v", is_flag=True, help="Log progress to stderr")
@click.pass_context
def cli(ctx, db_path: str | None, review_threshold: float, verbose: bool):
    """Finclassify - Bank transaction classification.

    Bootstrap a company's chart of accounts, maintain tiered mapping rules,
    classify imported bank transactions and find descriptions the rules miss.
    """
    ctx.ensure_object(dict)
    ctx.obj["review_threshold"] = review_threshold
    if verbose:
        setup_logging(verbose)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
company.register_commands(cli)
chart.register_commands(cli)
rule.register_commands(cli)
import_cmd.register_commands(cli)
classify.register_commands(cli)
analyze.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
