"""
Portal Services
===============

Domain logic used by the portal routes: scoring, reports, share links,
risk matrix, gamification, policy generation, file storage and the
external D-ID and LLM integrations.
"""

from services.portal.services.assistant import answer_question
from services.portal.services.catalog import DomainControls, load_framework_controls
from services.portal.services.did_agent import DIDAgentClient, DIDAgentError, get_did_client
from services.portal.services.risk_prediction import (
    RiskPredictionError,
    RiskPredictionService,
    get_risk_prediction_service,
)
from services.portal.services.scoring import StatusTally, completion_score, compliance_score
from services.portal.services.storage import FileStorage, UploadRejected, get_file_storage


__all__ = [
    "answer_question",
    "DomainControls",
    "load_framework_controls",
    "DIDAgentClient",
    "DIDAgentError",
    "get_did_client",
    "RiskPredictionError",
    "RiskPredictionService",
    "get_risk_prediction_service",
    "StatusTally",
    "completion_score",
    "compliance_score",
    "FileStorage",
    "UploadRejected",
    "get_file_storage",
]
