"""CSV import command."""

import click
from finclassify.cli.company_resolution import resolve_company_or_exit
from finclassify.domain.csv_import import CSVImportService


@click.command("import")
@click.argument("company", metavar="COMPANY")
@click.argument("csv_file", type=click.Path(exists=True))
@click.pass_context
def import_csv(ctx, company: str, csv_file: str):
    """Import bank transactions from a CSV file.

    COMPANY can be a company name or ID. The file needs date, description and
    amount columns; direction and reference are optional.
    """
    company_id = resolve_company_or_exit(ctx, company)
    service = CSVImportService(ctx.obj["db"])

    try:
        result = service.import_csv(company_id, csv_file)
        click.echo("\nImport complete:")
        click.echo(f"  Imported: {result['imported']} transactions")
        if result["errors"]:
            click.echo(f"  Errors: {len(result['errors'])}")
            for error in result["errors"]:
                click.echo(f"    {error}", err=True)
    except (ValueError, FileNotFoundError) as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_csv)
