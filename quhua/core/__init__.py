"""Core data model for administrative divisions."""

from quhua.core.region import (
    EMPLOYMENT_RATE_NA,
    LEVEL_NAMES,
    NO_PARENT,
    ROOT_CODE,
    ROOT_LEVEL,
    ROOT_NAME,
    DivisionRecord,
)

__all__ = [
    "DivisionRecord",
    "EMPLOYMENT_RATE_NA",
    "LEVEL_NAMES",
    "NO_PARENT",
    "ROOT_CODE",
    "ROOT_LEVEL",
    "ROOT_NAME",
]
