"""
Framework Catalogue Routes
==========================

Frameworks, domains, subdomains and controls.

Reads are public; creating catalogue entries requires an admin.

Version: 0.1.0
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal.dependencies import get_or_404, require_admin
from services.portal.models import ControlModel, DomainModel, FrameworkModel, SubdomainModel
from shared.auth import User
from shared.database.postgres import get_postgres_session
from shared.logging import get_logger
from shared.models.framework import (
    Control,
    ControlCreate,
    Domain,
    DomainCreate,
    Framework,
    FrameworkCreate,
    Subdomain,
    SubdomainCreate,
    SubdomainUpdate,
)


logger = get_logger(__name__)

router = APIRouter()


async def _domains_of(db: AsyncSession, framework_id: int) -> list[Domain]:
    result = await db.execute(
        select(DomainModel)
        .where(DomainModel.framework_id == framework_id)
        .order_by(DomainModel.order, DomainModel.id)
    )
    return [Domain.model_validate(d) for d in result.scalars().all()]


async def _subdomains_of(db: AsyncSession, domain_id: int) -> list[Subdomain]:
    result = await db.execute(
        select(SubdomainModel)
        .where(SubdomainModel.domain_id == domain_id)
        .order_by(SubdomainModel.order, SubdomainModel.id)
    )
    return [Subdomain.model_validate(s) for s in result.scalars().all()]


async def _controls_of_subdomain(db: AsyncSession, subdomain_id: int) -> list[Control]:
    result = await db.execute(
        select(ControlModel).where(ControlModel.subdomain_id == subdomain_id).order_by(ControlModel.id)
    )
    return [Control.model_validate(c) for c in result.scalars().all()]


async def _controls_of_domain(db: AsyncSession, domain_id: int) -> list[Control]:
    result = await db.execute(
        select(ControlModel)
        .join(SubdomainModel, ControlModel.subdomain_id == SubdomainModel.id)
        .where(SubdomainModel.domain_id == domain_id)
        .order_by(SubdomainModel.order, SubdomainModel.id, ControlModel.id)
    )
    return [Control.model_validate(c) for c in result.scalars().all()]


# =============================================================================
# Frameworks
# =============================================================================


@router.get("/frameworks", response_model=list[Framework])
async def list_frameworks(
    db: AsyncSession = Depends(get_postgres_session),
) -> list[Framework]:
    result = await db.execute(select(FrameworkModel).order_by(FrameworkModel.id))
    return [Framework.model_validate(f) for f in result.scalars().all()]


@router.post("/frameworks", response_model=Framework, status_code=status.HTTP_201_CREATED)
async def create_framework(
    data: FrameworkCreate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(require_admin),
) -> Framework:
    existing = await db.execute(select(FrameworkModel.id).where(FrameworkModel.name == data.name))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Framework already exists: {data.name}",
        )

    framework = FrameworkModel(**data.model_dump())
    db.add(framework)
    await db.flush()

    logger.info("framework_created", framework_id=framework.id, name=framework.name, user_id=current_user.id)
    return Framework.model_validate(framework)


@router.get("/frameworks/{framework_id}", response_model=Framework)
async def get_framework(
    framework_id: int,
    db: AsyncSession = Depends(get_postgres_session),
) -> Framework:
    framework = await get_or_404(db, FrameworkModel, framework_id, "Framework")
    return Framework.model_validate(framework)


@router.get("/frameworks/{framework_id}/domains", response_model=list[Domain])
async def list_framework_domains(
    framework_id: int,
    db: AsyncSession = Depends(get_postgres_session),
) -> list[Domain]:
    await get_or_404(db, FrameworkModel, framework_id, "Framework")
    return await _domains_of(db, framework_id)


# =============================================================================
# Domains
# =============================================================================


@router.get("/domains", response_model=list[Domain])
async def list_domains(
    framework_id: int | None = Query(default=None, description="Filter by framework"),
    db: AsyncSession = Depends(get_postgres_session),
) -> list[Domain]:
    if framework_id is not None:
        return await _domains_of(db, framework_id)
    result = await db.execute(select(DomainModel).order_by(DomainModel.framework_id, DomainModel.order))
    return [Domain.model_validate(d) for d in result.scalars().all()]


@router.post("/domains", response_model=Domain, status_code=status.HTTP_201_CREATED)
async def create_domain(
    data: DomainCreate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(require_admin),
) -> Domain:
    await get_or_404(db, FrameworkModel, data.framework_id, "Framework")
    domain = DomainModel(**data.model_dump())
    db.add(domain)
    await db.flush()

    logger.info("domain_created", domain_id=domain.id, framework_id=data.framework_id, user_id=current_user.id)
    return Domain.model_validate(domain)


@router.get("/domains/{domain_id}", response_model=Domain)
async def get_domain(
    domain_id: int,
    db: AsyncSession = Depends(get_postgres_session),
) -> Domain:
    domain = await get_or_404(db, DomainModel, domain_id, "Domain")
    return Domain.model_validate(domain)


@router.get("/domains/{domain_id}/subdomains", response_model=list[Subdomain])
async def list_domain_subdomains(
    domain_id: int,
    db: AsyncSession = Depends(get_postgres_session),
) -> list[Subdomain]:
    await get_or_404(db, DomainModel, domain_id, "Domain")
    return await _subdomains_of(db, domain_id)


@router.get("/domains/{domain_id}/controls", response_model=list[Control])
async def list_domain_controls(
    domain_id: int,
    db: AsyncSession = Depends(get_postgres_session),
) -> list[Control]:
    await get_or_404(db, DomainModel, domain_id, "Domain")
    return await _controls_of_domain(db, domain_id)


# =============================================================================
# Subdomains
# =============================================================================


@router.get("/subdomains", response_model=list[Subdomain])
async def list_subdomains(
    domain_id: int | None = Query(default=None, description="Filter by domain"),
    db: AsyncSession = Depends(get_postgres_session),
) -> list[Subdomain]:
    if domain_id is not None:
        return await _subdomains_of(db, domain_id)
    result = await db.execute(select(SubdomainModel).order_by(SubdomainModel.domain_id, SubdomainModel.order))
    return [Subdomain.model_validate(s) for s in result.scalars().all()]


@router.post("/subdomains", response_model=Subdomain, status_code=status.HTTP_201_CREATED)
async def create_subdomain(
    data: SubdomainCreate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(require_admin),
) -> Subdomain:
    await get_or_404(db, DomainModel, data.domain_id, "Domain")
    subdomain = SubdomainModel(**data.model_dump())
    db.add(subdomain)
    await db.flush()

    logger.info("subdomain_created", subdomain_id=subdomain.id, domain_id=data.domain_id, user_id=current_user.id)
    return Subdomain.model_validate(subdomain)


@router.get("/subdomains/{subdomain_id}", response_model=Subdomain)
async def get_subdomain(
    subdomain_id: int,
    db: AsyncSession = Depends(get_postgres_session),
) -> Subdomain:
    subdomain = await get_or_404(db, SubdomainModel, subdomain_id, "Subdomain")
    return Subdomain.model_validate(subdomain)


@router.put("/subdomains/{subdomain_id}", response_model=Subdomain)
async def update_subdomain(
    subdomain_id: int,
    data: SubdomainUpdate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(require_admin),
) -> Subdomain:
    subdomain = await get_or_404(db, SubdomainModel, subdomain_id, "Subdomain")
    for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(subdomain, key, value)
    await db.flush()

    logger.info("subdomain_updated", subdomain_id=subdomain_id, user_id=current_user.id)
    return Subdomain.model_validate(subdomain)


@router.get("/subdomains/{subdomain_id}/controls", response_model=list[Control])
async def list_subdomain_controls(
    subdomain_id: int,
    db: AsyncSession = Depends(get_postgres_session),
) -> list[Control]:
    await get_or_404(db, SubdomainModel, subdomain_id, "Subdomain")
    return await _controls_of_subdomain(db, subdomain_id)


# =============================================================================
# Controls
# =============================================================================


@router.get("/controls", response_model=list[Control])
async def list_controls(
    domain_id: int | None = Query(default=None),
    subdomain_id: int | None = Query(default=None),
    db: AsyncSession = Depends(get_postgres_session),
) -> list[Control]:
    """List controls of a subdomain, or of a whole domain."""
    if subdomain_id is not None:
        return await _controls_of_subdomain(db, subdomain_id)
    if domain_id is not None:
        return await _controls_of_domain(db, domain_id)
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Either domain_id or subdomain_id is required",
    )


@router.get("/controls/{control_id}", response_model=Control)
async def get_control(
    control_id: int,
    db: AsyncSession = Depends(get_postgres_session),
) -> Control:
    control = await get_or_404(db, ControlModel, control_id, "Control")
    return Control.model_validate(control)


@router.post("/controls", response_model=Control, status_code=status.HTTP_201_CREATED)
async def create_control(
    data: ControlCreate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(require_admin),
) -> Control:
    await get_or_404(db, SubdomainModel, data.subdomain_id, "Subdomain")
    control = ControlModel(**data.model_dump())
    db.add(control)
    await db.flush()

    logger.info("control_created", control_id=control.id, code=control.control_id, user_id=current_user.id)
    return Control.model_validate(control)
