"""Company registry service."""

import logging
from typing import Optional, TYPE_CHECKING

from finclassify.domain.entities import Company
from finclassify.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    company_name_not_found,
    company_not_found,
)

if TYPE_CHECKING:
    from finclassify.database.base import Database

logger = logging.getLogger(__name__)


class CompanyService:
    """Service for managing companies."""

    def __init__(self, db: "Database"):
        """Initialize company service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_company(self, name: str) -> int:
        """Register a company.

        Args:
            name: Company name (unique)

        Returns:
            Company ID

        Raises:
            ValidationError: If the name is empty
            ConflictError: If a company with this name already exists
        """
        name = name.strip()
        if not name:
            raise ValidationError("Company name must not be empty")
        if self.db.get_company_by_name(name) is not None:
            raise ConflictError(f"Company with name '{name}' already exists")
        company_id = self.db.create_company(name)
        logger.info("Created company %s (%s)", company_id, name)
        return company_id

    def get_company(self, company_id: int) -> Optional[Company]:
        """Get company by ID, or None if not found."""
        return self.db.get_company(company_id)

    def company_exists(self, company_id: int) -> bool:
        return self.db.company_exists(company_id)

    def list_companies(self) -> list[Company]:
        return self.db.list_companies()

    def resolve_company(self, company: str | int) -> int:
        """Resolve a company name or ID to a company ID.

        A value that parses as an integer is treated as an ID; anything else
        is looked up by name.

        Raises:
            NotFoundError: If no company matches
        """
        if isinstance(company, int) or str(company).strip().isdigit():
            company_id = int(company)
            if not self.db.company_exists(company_id):
                raise NotFoundError(company_not_found(company_id))
            return company_id

        found = self.db.get_company_by_name(str(company).strip())
        if found is None:
            raise NotFoundError(company_name_not_found(str(company)))
        return found.id
