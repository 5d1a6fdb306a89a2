"""
Portal Routes
=============

API route handlers for the compliance portal.
"""

from services.portal.routes import (
    assessments,
    assistant,
    auth,
    company,
    engagement,
    frameworks,
    gamification,
    onboarding,
    policies,
    policy_management,
    reports,
    risk_prediction,
    risks,
    users,
)


__all__ = [
    "assessments",
    "assistant",
    "auth",
    "company",
    "engagement",
    "frameworks",
    "gamification",
    "onboarding",
    "policies",
    "policy_management",
    "reports",
    "risk_prediction",
    "risks",
    "users",
]
