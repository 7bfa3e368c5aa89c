"""CLI helper for resolving a COMPANY argument."""

from __future__ import annotations

import click
from finclassify.domain.company import CompanyService
from finclassify.domain.errors import NotFoundError


def resolve_company_or_exit(ctx: click.Context, company: str | int) -> int:
    """Resolve a company name or ID, or exit with a CLI error."""
    service = CompanyService(ctx.obj["db"])
    try:
        return service.resolve_company(company)
    except NotFoundError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
