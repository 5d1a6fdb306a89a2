"""
Framework Database Models
=========================

SQLAlchemy ORM models for the framework catalogue.

Tables:
- frameworks: NCA ECC, SAMA CSF, PDPL, ISO 27001 ...
- domains / subdomains: ordered grouping within a framework
- controls: individual auditable requirements

Version: 0.1.0
"""

from typing import Any

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String, Text

from services.portal.models.types import utcnow
from shared.database.postgres import Base


class FrameworkModel(Base):
    __tablename__ = "frameworks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    display_name = Column(String(255), nullable=False)
    description = Column(Text)
    version = Column(String(50))

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Framework {self.id}: {self.name}>"


class DomainModel(Base):
    __tablename__ = "domains"
    __table_args__ = (Index("ix_domains_framework", "framework_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    framework_id = Column(Integer, ForeignKey("frameworks.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(100), nullable=False)
    display_name = Column(String(255), nullable=False)
    description = Column(Text)
    order = Column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Domain {self.id}: {self.name}>"


class SubdomainModel(Base):
    __tablename__ = "subdomains"
    __table_args__ = (Index("ix_subdomains_domain", "domain_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    domain_id = Column(Integer, ForeignKey("domains.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(100), nullable=False)
    display_name = Column(String(255), nullable=False)
    description = Column(Text)
    order = Column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Subdomain {self.id}: {self.name}>"


class ControlModel(Base):
    """A single auditable requirement."""

    __tablename__ = "controls"
    __table_args__ = (
        Index("ix_controls_subdomain", "subdomain_id"),
        Index("ix_controls_code", "control_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    subdomain_id = Column(Integer, ForeignKey("subdomains.id", ondelete="CASCADE"), nullable=False)
    control_id = Column(String(50), nullable=False)  # e.g. ECC-1.2.3
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    guidance = Column(Text)
    maturity_level = Column(Integer, nullable=False, default=1)
    reference_links = Column(JSON, default=list)
    implementation_guide = Column(Text)
    framework_specific = Column(JSON)

    def __repr__(self) -> str:
        return f"<Control {self.id}: {self.control_id}>"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "control_id": self.control_id,
            "name": self.name,
            "description": self.description,
            "guidance": self.guidance,
            "maturity_level": self.maturity_level,
        }
