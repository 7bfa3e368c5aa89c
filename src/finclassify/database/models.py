"""SQLAlchemy models for finclassify database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    Float,
    UniqueConstraint,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Company(Base):
    """Company registry model."""

    __tablename__ = "companies"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    categories = relationship("AccountCategory", back_populates="company")
    accounts = relationship("Account", back_populates="company")


class AccountCategory(Base):
    """Chart-of-accounts category model."""

    __tablename__ = "account_categories"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    name = Column(String, nullable=False)
    account_type = Column(String, nullable=False)
    normal_balance = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("company_id", "name", name="uq_company_category_name"),)

    # Relationships
    company = relationship("Company", back_populates="categories")
    accounts = relationship("Account", back_populates="category")


class Account(Base):
    """Chart-of-accounts account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    category_id = Column(Integer, ForeignKey("account_categories.id"), nullable=False)
    code = Column(String, nullable=False)
    name = Column(String, nullable=False)
    account_type = Column(String, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Account codes are unique per company
    __table_args__ = (UniqueConstraint("company_id", "code", name="uq_company_account_code"),)

    # Relationships
    company = relationship("Company", back_populates="accounts")
    category = relationship("AccountCategory", back_populates="accounts")


class MappingRule(Base):
    """Transaction mapping rule model. A NULL company_id marks a global rule."""

    __tablename__ = "mapping_rules"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=True)
    name = Column(String, nullable=False)
    pattern = Column(String, nullable=False)
    match_type = Column(String, nullable=False)
    tier = Column(String, nullable=False)
    target_account_code = Column(String, nullable=False)
    insertion_order = Column(Integer, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    source = Column(String, default="custom", nullable=False)
    supersedes_id = Column(Integer, ForeignKey("mapping_rules.id"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Seeding the same default rule twice for a company collides here
    __table_args__ = (
        UniqueConstraint("company_id", "name", name="uq_company_rule_name"),
        Index("ix_mapping_rules_company_active", "company_id", "active"),
    )


class CatalogRevision(Base):
    """One published change to a rule catalog. The highest ID is the version."""

    __tablename__ = "catalog_revisions"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=True)
    description = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Transaction(Base):
    """Imported bank transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    date = Column(Date, nullable=False)
    raw_description = Column(String, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    direction = Column(String, nullable=False)
    reference = Column(String, nullable=True)
    imported_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (Index("ix_transactions_company_date", "company_id", "date"),)


class ClassificationRun(Base):
    """One persisted classification batch."""

    __tablename__ = "classification_runs"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    catalog_version = Column(Integer, nullable=False)
    result_count = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    results = relationship("ClassificationResult", back_populates="run")


class ClassificationResult(Base):
    """Classification result row, appended per run and kept for audit."""

    __tablename__ = "classification_results"

    id = Column(Integer, primary_key=True)
    run_id = Column(Integer, ForeignKey("classification_runs.id"), nullable=False)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    matched_rule_id = Column(Integer, ForeignKey("mapping_rules.id"), nullable=True)
    account_code = Column(String, nullable=True)
    confidence = Column(Float, nullable=False)
    tier = Column(String, nullable=True)

    __table_args__ = (UniqueConstraint("run_id", "transaction_id", name="uq_run_transaction"),)

    # Relationships
    run = relationship("ClassificationRun", back_populates="results")


class AccountConfirmation(Base):
    """Manually confirmed account for a transaction."""

    __tablename__ = "account_confirmations"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    account_code = Column(String, nullable=False)
    confirmed_by = Column(String, nullable=True)
    confirmed_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
