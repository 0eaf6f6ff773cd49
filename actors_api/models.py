"""
Data models for the actors API.

Defines Pydantic models for actor records, the request/response views exposed
over HTTP, service results and scrape reports, with validation and camelCase
serialization for the wire format.
"""

from datetime import date
from datetime import datetime
from typing import Generic
from typing import List
from typing import Optional
from typing import TypeVar

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic.alias_generators import to_camel

from actors_api.errors import ErrorKind

T = TypeVar("T")

# Bounds of the 32-bit integer ids and ranks accepted over HTTP
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


class ActorRecord(BaseModel):
    """
    A stored actor.

    Produced by the scraper with id 0 (the store assigns identifiers on
    insert) or built by the service from a create request.
    """

    id: int = Field(
        default=0,
        ge=0,
        description="Store-assigned identifier (0 until inserted)"
    )

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Actor name"
    )

    rank: int = Field(
        ...,
        ge=INT32_MIN,
        le=INT32_MAX,
        description="Ranking position, unique across the store"
    )

    bio: str = Field(
        default="",
        description="Short biography snippet"
    )

    birth_date: Optional[date] = Field(
        default=None,
        description="Date of birth when known"
    )

    image_url: str = Field(
        default="",
        description="Portrait image URL"
    )

    known_for: List[str] = Field(
        default_factory=list,
        description="Notable works, in display order"
    )

    source: str = Field(
        default="",
        description="Provenance tag, e.g. the scraping provider name"
    )


class ApiModel(BaseModel):
    """Base for models that travel over HTTP with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ActorSummary(ApiModel):
    id: int
    name: str

    @classmethod
    def from_record(cls, record: ActorRecord) -> "ActorSummary":
        return cls(id=record.id, name=record.name)


class ActorDetail(ApiModel):
    id: int
    name: str
    rank: int
    bio: str = ""
    birth_date: Optional[date] = None
    image_url: str = ""
    known_for: List[str] = Field(default_factory=list)
    source: str = ""

    @classmethod
    def from_record(cls, record: ActorRecord) -> "ActorDetail":
        return cls(**record.model_dump())


class ActorUpdate(ApiModel):
    """
    Body of an update request.

    Only the name length is checked here; a blank name is reported by the
    service as a validation error rather than by schema parsing.
    """

    name: str = Field(default="", max_length=200)
    rank: int = Field(default=0, ge=INT32_MIN, le=INT32_MAX)
    bio: str = Field(default="", max_length=2000)
    birth_date: Optional[date] = None
    image_url: str = Field(default="", max_length=500)
    known_for: List[str] = Field(default_factory=list)


class ActorCreate(ActorUpdate):
    """Body of a create request; source can only be set here."""

    source: str = ""


class ActorFilter(BaseModel):
    """Filter and pagination parameters for actor listing."""

    name: Optional[str] = None
    min_rank: Optional[int] = None
    max_rank: Optional[int] = None
    page_number: int = 1
    page_size: int = 10


class PagedResult(ApiModel, Generic[T]):
    data: List[T] = Field(default_factory=list)
    total_count: int = 0
    page_number: int = 1
    page_size: int = 10


class ServiceResult(BaseModel, Generic[T]):
    """
    Outcome of a service operation.

    Either `value` is set, or `error_kind` and `message` describe why the
    operation was refused. The HTTP layer translates the kind into a status.
    """

    value: Optional[T] = None
    error_kind: Optional[ErrorKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    @classmethod
    def success(cls, value: T) -> "ServiceResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "ServiceResult[T]":
        return cls(error_kind=kind, message=message)


class ScrapeReport(BaseModel):
    """
    Summary of one extraction run with counts and diagnostics.

    Per-item failures never abort a run; they end up in `errors` instead.
    """

    provider: str = Field(
        ...,
        description="Provider the page was scraped from"
    )

    started_at: datetime = Field(
        ...,
        description="When extraction started"
    )

    completed_at: Optional[datetime] = Field(
        default=None,
        description="When extraction completed"
    )

    items_found: int = Field(
        default=0,
        ge=0,
        description="Number of candidate item nodes in the document"
    )

    actors_extracted: int = Field(
        default=0,
        ge=0,
        description="Number of actor records produced"
    )

    items_skipped: int = Field(
        default=0,
        ge=0,
        description="Nodes that were not actor entries (no title)"
    )

    errors: List[str] = Field(
        default_factory=list,
        description="Per-item extraction failures"
    )

    warnings: List[str] = Field(
        default_factory=list,
        description="Non-fatal oddities noticed during extraction"
    )

    @property
    def duration_seconds(self) -> Optional[float]:
        """Calculate operation duration in seconds."""
        if not self.completed_at:
            return None

        delta = self.completed_at - self.started_at
        return delta.total_seconds()

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def add_error(self, error: str) -> None:
        self.errors.append(error)

    def add_warning(self, warning: str) -> None:
        self.warnings.append(warning)
