"""
Compliance Portal Service
=========================

REST API behind the MetaWorks compliance portal.

Features:
- Framework catalogue (NCA ECC, SAMA CSF, PDPL, ISO 27001)
- Assessments, risk heatmap and remediation tasks
- Compliance reports with shareable links
- Risk register and assessment risk reviews
- Policy templates and generated policies
- Onboarding checklist with gamification
- Virtual assistant, talking avatar and AI risk prediction

Port: 5000
"""

__version__ = "0.1.0"
