"""
Reference Data Seeding
======================

Development and first-run reference data:
- Framework catalogue (NCA ECC, SAMA CSF, ISO/IEC 27001, PDPL)
- Policy categories
- Onboarding steps and badges
- Global sample risks (no company)

Every group is skipped when its table already holds rows, so seeding
can be re-run safely.

Version: 0.1.0
"""

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal.models import (
    BadgeModel,
    ControlModel,
    DomainModel,
    FrameworkModel,
    OnboardingStepModel,
    PolicyCategoryModel,
    RiskModel,
    SubdomainModel,
)
from services.portal.services.risk_matrix import inherent_level, residual_level
from shared.logging import get_logger
from shared.models.onboarding import BadgeCategory, StepType
from shared.models.risk import ControlEffectiveness, Impact, Likelihood, RiskCategory


logger = get_logger(__name__)

CONTROLS_PER_SUBDOMAIN = 5


@dataclass
class DomainSeed:
    code: str
    display_name: str
    description: str
    control_name: str
    control_description: str
    subdomains: list[str] = field(default_factory=lambda: ["General Requirements"])


@dataclass
class FrameworkSeed:
    name: str
    display_name: str
    description: str
    version: str
    domains: list[DomainSeed] = field(default_factory=list)


@dataclass
class SeedSummary:
    frameworks: int = 0
    domains: int = 0
    subdomains: int = 0
    controls: int = 0
    policy_categories: int = 0
    onboarding_steps: int = 0
    badges: int = 0
    risks: int = 0

    def as_dict(self) -> dict[str, int]:
        return dict(self.__dict__)


# =============================================================================
# Data
# =============================================================================

FRAMEWORKS: list[FrameworkSeed] = [
    FrameworkSeed(
        name="NCA ECC",
        display_name="NCA Essential Cybersecurity Controls",
        description=(
            "Minimum cybersecurity requirements issued by the National Cybersecurity "
            "Authority for national organizations in Saudi Arabia."
        ),
        version="1.0",
        domains=[
            DomainSeed(
                code="ECC-1",
                display_name="Cybersecurity Governance",
                description="Cybersecurity strategy, policies, roles and compliance management.",
                control_name="Cybersecurity Policy",
                control_description="Define, document and approve cybersecurity policies and procedures.",
                subdomains=["Cybersecurity Strategy", "Cybersecurity Policies and Procedures"],
            ),
            DomainSeed(
                code="ECC-2",
                display_name="Cybersecurity Risk Management",
                description="Identification, assessment and treatment of cybersecurity risks.",
                control_name="Risk Assessment",
                control_description="Perform periodic cybersecurity risk assessments of information assets.",
            ),
            DomainSeed(
                code="ECC-3",
                display_name="Cybersecurity Operations",
                description="Event logging, monitoring and incident management.",
                control_name="Security Monitoring",
                control_description="Monitor systems continuously to detect cybersecurity events.",
                subdomains=["Event Logs and Monitoring", "Incident and Threat Management"],
            ),
            DomainSeed(
                code="ECC-4",
                display_name="Technology Security",
                description="Security of systems, networks, applications and data.",
                control_name="Access Control",
                control_description="Implement strong access control mechanisms for all systems and data.",
            ),
            DomainSeed(
                code="ECC-5",
                display_name="Third-Party Cybersecurity",
                description="Cybersecurity requirements for vendors and cloud providers.",
                control_name="Vendor Management",
                control_description="Assess and manage the cybersecurity risks of third parties.",
            ),
        ],
    ),
    FrameworkSeed(
        name="SAMA CSF",
        display_name="SAMA Cyber Security Framework",
        description="Cyber security framework of the Saudi Central Bank for member organizations.",
        version="1.0",
        domains=[
            DomainSeed(
                code="SAMA-1",
                display_name="Leadership and Governance",
                description="Leadership commitment and governance structures.",
                control_name="Governance Requirement",
                control_description="Establish cyber security governance with board oversight.",
            ),
            DomainSeed(
                code="SAMA-2",
                display_name="Risk Management and Compliance",
                description="Cyber security risk management processes and regulatory compliance.",
                control_name="Risk Management Requirement",
                control_description="Operate a cyber security risk management process.",
            ),
            DomainSeed(
                code="SAMA-3",
                display_name="Operations and Technology",
                description="Identity and access management, secure development and security operations.",
                control_name="Operations Requirement",
                control_description="Protect information assets through operational security controls.",
            ),
            DomainSeed(
                code="SAMA-4",
                display_name="Third-Party Security",
                description="Security of outsourcing and third-party services.",
                control_name="Third-Party Requirement",
                control_description="Include cyber security requirements in third-party contracts.",
            ),
        ],
    ),
    FrameworkSeed(
        name="ISO 27001",
        display_name="ISO/IEC 27001",
        description="International standard for information security management systems.",
        version="2022",
    ),
    FrameworkSeed(
        name="PDPL",
        display_name="Saudi Arabia PDPL",
        description="Personal Data Protection Law of the Kingdom of Saudi Arabia.",
        version="2021",
    ),
]

POLICY_CATEGORIES: list[dict[str, Any]] = [
    {"name": "Information Security", "description": "Overall information security policies"},
    {"name": "Access Control", "description": "Identity, authentication and authorization"},
    {"name": "Data Protection", "description": "Classification, privacy and retention of data"},
    {"name": "Incident Response", "description": "Detection, response and recovery procedures"},
]

ONBOARDING_STEPS: list[dict[str, Any]] = [
    {
        "title": "Welcome to MetaWorks",
        "description": "Learn how the compliance portal is organized.",
        "type": StepType.LEARNING,
        "content": {"sections": ["Dashboard", "Assessments", "Reports", "Policies"]},
        "points": 10,
        "estimated_duration": 5,
    },
    {
        "title": "Compliance Basics",
        "description": "Quiz on the frameworks supported by the portal.",
        "type": StepType.QUIZ,
        "content": {
            "questions": [
                {
                    "question": "Which authority issues the Essential Cybersecurity Controls?",
                    "options": ["NCA", "SAMA", "CITC"],
                    "answer": "NCA",
                },
            ]
        },
        "points": 30,
        "estimated_duration": 10,
    },
    {
        "title": "Complete Your Company Profile",
        "description": "Add your company details and cybersecurity staff.",
        "type": StepType.TASK,
        "content": {"link": "/company"},
        "points": 40,
        "estimated_duration": 15,
    },
    {
        "title": "Run Your First Assessment",
        "description": "Start an assessment against a framework of your choice.",
        "type": StepType.ASSESSMENT,
        "content": {"link": "/assessments"},
        "points": 50,
        "estimated_duration": 30,
    },
]

BADGES: list[dict[str, Any]] = [
    {
        "name": "First Steps",
        "description": "Earned your first points.",
        "category": BadgeCategory.PARTICIPATION,
        "required_points": 10,
    },
    {
        "name": "Quick Learner",
        "description": "Reached 50 points.",
        "category": BadgeCategory.LEARNING,
        "required_points": 50,
    },
    {
        "name": "Compliance Champion",
        "description": "Reached 100 points.",
        "category": BadgeCategory.ACHIEVEMENT,
        "required_points": 100,
    },
    {
        "name": "Perfectionist",
        "description": "Scored 100 on every quiz.",
        "category": BadgeCategory.ACHIEVEMENT,
        "is_secret": True,
    },
]

SAMPLE_RISKS: list[dict[str, Any]] = [
    {
        "title": "Unpatched internet-facing systems",
        "description": "Public services run software with known vulnerabilities.",
        "category": RiskCategory.OPERATIONAL,
        "likelihood": Likelihood.LIKELY,
        "impact": Impact.MAJOR,
        "existing_controls": "Monthly patch cycle",
        "control_effectiveness": ControlEffectiveness.NEEDS_IMPROVEMENT,
    },
    {
        "title": "Missing data protection officer",
        "description": "No accountable owner for personal data processing.",
        "category": RiskCategory.COMPLIANCE,
        "likelihood": Likelihood.POSSIBLE,
        "impact": Impact.SERIOUS,
    },
    {
        "title": "Third-party access without review",
        "description": "Vendor accounts are not reviewed periodically.",
        "category": RiskCategory.STRATEGIC,
        "likelihood": Likelihood.UNLIKELY,
        "impact": Impact.MAJOR,
        "existing_controls": "Quarterly access review",
        "control_effectiveness": ControlEffectiveness.EFFECTIVE,
    },
]


# =============================================================================
# Seeding
# =============================================================================


async def _is_empty(db: AsyncSession, model: type) -> bool:
    result = await db.execute(select(func.count()).select_from(model))
    return not result.scalar()


def build_controls(domain: DomainSeed, subdomain_index: int, subdomain_id: int) -> list[ControlModel]:
    """Controls are numbered <domain code>.<subdomain>.<n>, maturity cycling 1-3."""
    return [
        ControlModel(
            subdomain_id=subdomain_id,
            control_id=f"{domain.code}.{subdomain_index}.{n}",
            name=f"{domain.control_name} {n}",
            description=domain.control_description,
            guidance="Follow industry best practices and organizational policies.",
            maturity_level=(n - 1) % 3 + 1,
            reference_links=[],
        )
        for n in range(1, CONTROLS_PER_SUBDOMAIN + 1)
    ]


async def seed_frameworks(db: AsyncSession, summary: SeedSummary) -> None:
    if not await _is_empty(db, FrameworkModel):
        logger.info("seed_skipped", table="frameworks")
        return

    for framework_seed in FRAMEWORKS:
        framework = FrameworkModel(
            name=framework_seed.name,
            display_name=framework_seed.display_name,
            description=framework_seed.description,
            version=framework_seed.version,
        )
        db.add(framework)
        await db.flush()
        summary.frameworks += 1

        for order, domain_seed in enumerate(framework_seed.domains, start=1):
            domain = DomainModel(
                framework_id=framework.id,
                name=domain_seed.code,
                display_name=domain_seed.display_name,
                description=domain_seed.description,
                order=order,
            )
            db.add(domain)
            await db.flush()
            summary.domains += 1

            for index, subdomain_name in enumerate(domain_seed.subdomains, start=1):
                subdomain = SubdomainModel(
                    domain_id=domain.id,
                    name=f"{domain_seed.code}-{index}",
                    display_name=subdomain_name,
                    order=index,
                )
                db.add(subdomain)
                await db.flush()
                summary.subdomains += 1

                controls = build_controls(domain_seed, index, subdomain.id)
                db.add_all(controls)
                summary.controls += len(controls)

        logger.info("framework_seeded", framework=framework.name, domains=len(framework_seed.domains))


async def seed_policy_categories(db: AsyncSession, summary: SeedSummary) -> None:
    if not await _is_empty(db, PolicyCategoryModel):
        logger.info("seed_skipped", table="policy_categories")
        return
    db.add_all(PolicyCategoryModel(**data) for data in POLICY_CATEGORIES)
    summary.policy_categories = len(POLICY_CATEGORIES)


async def seed_onboarding(db: AsyncSession, summary: SeedSummary) -> None:
    if await _is_empty(db, OnboardingStepModel):
        db.add_all(
            OnboardingStepModel(order=order, prerequisite_step_ids=[], **data)
            for order, data in enumerate(ONBOARDING_STEPS, start=1)
        )
        summary.onboarding_steps = len(ONBOARDING_STEPS)
    else:
        logger.info("seed_skipped", table="onboarding_steps")

    if await _is_empty(db, BadgeModel):
        db.add_all(BadgeModel(required_steps=[], **data) for data in BADGES)
        summary.badges = len(BADGES)
    else:
        logger.info("seed_skipped", table="badges")


def build_risk(data: dict[str, Any]) -> RiskModel:
    """Global sample risk with levels taken from the risk matrix."""
    inherent = inherent_level(data["likelihood"], data["impact"])
    return RiskModel(
        **data,
        inherent_risk_level=inherent,
        residual_risk_level=residual_level(inherent, data.get("control_effectiveness")),
        company_id=None,
    )


async def seed_risks(db: AsyncSession, summary: SeedSummary) -> None:
    if not await _is_empty(db, RiskModel):
        logger.info("seed_skipped", table="risks")
        return
    db.add_all(build_risk(data) for data in SAMPLE_RISKS)
    summary.risks = len(SAMPLE_RISKS)


async def seed_reference_data(db: AsyncSession) -> SeedSummary:
    """Insert every reference data group that is still empty."""
    summary = SeedSummary()
    await seed_frameworks(db, summary)
    await seed_policy_categories(db, summary)
    await seed_onboarding(db, summary)
    await seed_risks(db, summary)
    await db.flush()

    logger.info("reference_data_seeded", **summary.as_dict())
    return summary
