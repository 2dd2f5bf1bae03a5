"""Shared types, enums, and base models used across econboard domain models."""

from datetime import datetime, timezone
from enum import StrEnum
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from uuid_extensions import uuid7


def utc_now() -> datetime:
    """Return the current UTC timestamp (timezone-aware)."""
    return datetime.now(tz=timezone.utc)


def new_uuid7() -> UUID:
    """Generate a new time-sortable UUID v7."""
    return uuid7()


# --- Reusable annotated types ---

UUIDv7 = Annotated[UUID, Field(description="Time-sortable UUID v7.")]
UTCTimestamp = Annotated[
    datetime, Field(description="UTC timezone-aware timestamp.")
]


# --- Shared enums ---


class Quarter(StrEnum):
    """Calendar quarter of a period observation."""

    Q1 = "Q1"
    Q2 = "Q2"
    Q3 = "Q3"
    Q4 = "Q4"


class Sector(StrEnum):
    """Top-level sectors that carry a sub-sector breakdown."""

    SERVICES = "services"
    AGRICULTURE = "agriculture"
    INDUSTRY = "industry"


class RecordKind(StrEnum):
    """Record kinds stored behind the record gateway."""

    SECTOR_SHARE = "SECTOR_SHARE"
    PERIOD_AMOUNT = "PERIOD_AMOUNT"
    TARGET = "TARGET"
    SECTOR_SNAPSHOT = "SECTOR_SNAPSHOT"
    PERIOD_COMPARISON = "PERIOD_COMPARISON"
    SECTOR_GROWTH = "SECTOR_GROWTH"


# --- Base model ---


class EconBase(BaseModel):
    """Base model with common configuration for all econboard payloads.

    Fields are snake_case in Python and camelCase on the wire. Non-finite
    floats (inf, nan) are rejected.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        allow_inf_nan=False,
        protected_namespaces=(),
    )
