"""
MetaWorks Shared Library
========================

Common utilities and configuration shared by MetaWorks services.

Modules:
    - config: Configuration management with Pydantic Settings
    - logging: Structured logging with structlog
    - auth: JWT and Clerk authentication, role checks
    - database: PostgreSQL and Redis clients
    - llm: LLM provider abstraction (OpenAI)
    - models: Shared Pydantic request/response models

Version: 0.1.0
"""

__version__ = "0.1.0"
__author__ = "MetaWorks Team"

from shared.config import settings
from shared.logging import get_logger, setup_logging


__all__ = [
    "settings",
    "get_logger",
    "setup_logging",
    "__version__",
]
