"""
Framework Catalogue Queries
===========================

Loads a framework's controls grouped by domain, in display order.

Version: 0.1.0
"""

from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal.models import ControlModel, DomainModel, SubdomainModel


@dataclass
class DomainControls:
    """A domain with its controls, ordered by subdomain then control id."""

    domain: DomainModel
    controls: list[ControlModel] = field(default_factory=list)


async def load_framework_controls(db: AsyncSession, framework_id: int) -> list[DomainControls]:
    """Return every domain of a framework with its controls."""
    domain_result = await db.execute(
        select(DomainModel)
        .where(DomainModel.framework_id == framework_id)
        .order_by(DomainModel.order, DomainModel.id)
    )
    tree = [DomainControls(domain=domain) for domain in domain_result.scalars().all()]
    by_domain = {entry.domain.id: entry for entry in tree}

    control_result = await db.execute(
        select(ControlModel, SubdomainModel.domain_id)
        .join(SubdomainModel, ControlModel.subdomain_id == SubdomainModel.id)
        .join(DomainModel, SubdomainModel.domain_id == DomainModel.id)
        .where(DomainModel.framework_id == framework_id)
        .order_by(SubdomainModel.order, SubdomainModel.id, ControlModel.id)
    )
    for control, domain_id in control_result.all():
        entry = by_domain.get(domain_id)
        if entry is not None:
            entry.controls.append(control)

    return tree


def flatten_controls(tree: list[DomainControls]) -> list[ControlModel]:
    return [control for entry in tree for control in entry.controls]
