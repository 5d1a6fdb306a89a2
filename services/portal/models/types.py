"""
Column Helpers
==============

Shared column types for the portal tables.

Version: 0.1.0
"""

from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import Enum as SQLEnum


def utcnow() -> datetime:
    return datetime.now(UTC)


def db_enum(enum_cls: type[Enum]) -> SQLEnum:
    """
    Store a str-valued enum by its value in a VARCHAR column.

    Values such as "Very Likely" or "generated-policy" are not valid Python
    identifiers, so member names are never written to the database.
    """
    return SQLEnum(
        enum_cls,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        validate_strings=True,
        length=50,
    )
