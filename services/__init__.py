"""
MetaWorks Services
==================

Services for the MetaWorks cybersecurity compliance platform.

Services:
- portal: REST API for compliance assessments, reporting, risk registers,
  policy management, onboarding and the assistant integrations
"""

__all__ = [
    "portal",
]
