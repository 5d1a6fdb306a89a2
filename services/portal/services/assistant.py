"""
Virtual Assistant
=================

Keyword lookup over a table of canned compliance answers.

The lower-cased question is checked against each key in table order; the
first key it contains wins.

Version: 0.1.0
"""

from dataclasses import dataclass

from shared.logging import get_logger
from shared.models.assistant import AnswerCategory, AssistantAnswer


logger = get_logger(__name__)


@dataclass(frozen=True)
class CannedAnswer:
    key: str
    answer: str
    category: AnswerCategory


ANSWERS: tuple[CannedAnswer, ...] = (
    CannedAnswer(
        key="explain nca ecc framework",
        answer=(
            "The NCA Essential Cybersecurity Controls (ECC) is a regulatory framework developed by the "
            "National Cybersecurity Authority of Saudi Arabia. It consists of 5 domains, 29 subdomains, "
            "and 114 essential controls covering various aspects of cybersecurity. The domains include: "
            "Cybersecurity Governance, Cybersecurity Defense, Cybersecurity Resilience, Third-Party and "
            "Cloud Services Cybersecurity, and Industrial Control Systems Cybersecurity."
        ),
        category=AnswerCategory.GENERAL,
    ),
    CannedAnswer(
        key="control 2-5-3",
        answer=(
            "Control 2-5-3 falls under the Cybersecurity Defense domain and addresses secure network "
            "configurations. It requires organizations to implement secure configurations for network "
            "devices including routers, switches, and firewalls according to industry standards. You "
            "need to document your configurations, review them regularly, and restrict administrative "
            "access to these devices."
        ),
        category=AnswerCategory.CONTROL,
    ),
    CannedAnswer(
        key="security policy template",
        answer=(
            "I can help you create a security policy template. A comprehensive information security "
            "policy should include: 1) Purpose and scope, 2) Roles and responsibilities, 3) Data "
            "classification, 4) Access control rules, 5) Password requirements, 6) Incident response "
            "procedures, 7) Acceptable use guidelines, 8) Compliance requirements. Would you like me "
            "to generate a specific section?"
        ),
        category=AnswerCategory.POLICY,
    ),
    CannedAnswer(
        key="risk assessment",
        answer=(
            "A risk assessment under NCA ECC should include: 1) Asset identification and valuation, "
            "2) Threat identification, 3) Vulnerability assessment, 4) Risk calculation (Impact × "
            "Likelihood), 5) Risk prioritization, 6) Treatment plans. The ECC requires risk "
            "assessments to be conducted annually or after significant changes to systems or processes."
        ),
        category=AnswerCategory.GUIDANCE,
    ),
    CannedAnswer(
        key="compliance checklist",
        answer=(
            "Here's a basic NCA ECC compliance checklist: 1) Develop cybersecurity governance "
            "structure, 2) Implement security awareness training, 3) Deploy technical controls "
            "(firewalls, antivirus, etc.), 4) Establish incident response procedures, 5) Create backup "
            "and recovery plans, 6) Implement access control measures, 7) Perform regular "
            "vulnerability assessments, 8) Document all security policies and procedures. Would you "
            "like a more detailed checklist for a specific domain?"
        ),
        category=AnswerCategory.CHECKLIST,
    ),
)

FALLBACK_ANSWER = (
    "I don't have specific information about that query. You can ask me about NCA ECC controls, "
    "cybersecurity policies, risk assessments, or compliance checklists."
)


def answer_question(question: str, table: tuple[CannedAnswer, ...] = ANSWERS) -> AssistantAnswer:
    """Return the first canned answer whose key occurs in the question."""
    lowered = question.lower()
    for entry in table:
        if entry.key in lowered:
            logger.debug("assistant_answer_matched", key=entry.key)
            return AssistantAnswer(answer=entry.answer, category=entry.category, matched_key=entry.key)

    logger.debug("assistant_answer_fallback")
    return AssistantAnswer(answer=FALLBACK_ANSWER, category=AnswerCategory.GENERAL)
