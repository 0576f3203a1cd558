"""Core domain models and enumerations.

These are the canonical data shapes for users, cases, and sessions. Every
service produces or consumes these types, never raw dicts. The on-disk and
on-the-wire form uses camelCase keys (the frontend's shape); attributes are
snake_case via the alias generator. Value objects are frozen.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Role(StrEnum):
    """Identity roles known to the registry contract."""

    CLIENT = "client"
    LAWYER = "lawyer"
    JUDGE = "judge"
    ADMIN = "admin"


class CaseStatus(StrEnum):
    """Lifecycle status of a legal case."""

    REGISTERED = "Registered"
    IN_PROGRESS = "In Progress"
    SCHEDULED = "Scheduled"
    POSTPONED = "Postponed"
    CLOSED = "Closed"


class AuthDecision(StrEnum):
    """Outcome of a page authorization check."""

    ALLOWED = "allowed"
    DENIED = "denied"


class SessionState(StrEnum):
    """Per-tab authentication state."""

    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    APPROVED = "approved"
    PENDING = "pending"
    DENIED = "denied"


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------


class CamelModel(BaseModel):
    """Frozen model serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# ---------------------------------------------------------------------------
# Roster
# ---------------------------------------------------------------------------


class User(CamelModel):
    """A registered identity.

    ``bar_id`` is present iff the role is lawyer and ``judicial_id`` iff the
    role is judge. The descriptive fields only exist on seeded records.
    """

    address: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    email: str = ""
    role: Role
    bar_id: str | None = None
    judicial_id: str | None = None
    is_registered: bool = True
    is_approved: bool = False
    experience: str | None = None
    specialization: str | None = None
    company: str | None = None

    @model_validator(mode="after")
    def _identifier_matches_role(self) -> User:
        if (self.bar_id is not None) != (self.role is Role.LAWYER):
            raise ValueError("bar_id must be set for lawyers and only for lawyers")
        if (self.judicial_id is not None) != (self.role is Role.JUDGE):
            raise ValueError("judicial_id must be set for judges and only for judges")
        return self


# ---------------------------------------------------------------------------
# Cases
# ---------------------------------------------------------------------------


class Document(CamelModel):
    """A file attached to a case, addressed by its content identifier."""

    name: str = Field(..., min_length=1)
    content_identifier: str = Field(..., min_length=1)
    url: str = ""
    uploaded_by: str
    upload_date: date
    document_type: str = "pdf"


class Event(CamelModel):
    """A single entry in a case's history."""

    occurred_on: date = Field(..., alias="date")
    action: str = Field(..., min_length=1)
    by: str


class Case(CamelModel):
    """A legal case with its append-only documents and history."""

    id: int = Field(..., ge=1)
    title: str = Field(..., min_length=1)
    description: str = ""
    case_type: str
    submitted_by: str = Field(..., min_length=1)
    assigned_to: str | None = None
    judge: str | None = None
    status: CaseStatus = CaseStatus.REGISTERED
    filing_date: date
    next_hearing: date | None = None
    court_room: str | None = None
    documents: tuple[Document, ...] = ()
    history: tuple[Event, ...] = ()

    def with_document(self, document: Document) -> Case:
        return self.model_copy(update={"documents": (*self.documents, document)})

    def with_event(self, event: Event) -> Case:
        return self.model_copy(update={"history": (*self.history, event)})


class DocumentMetadata(CamelModel):
    """What the case manager stores alongside a document's CID."""

    name: str = Field(..., min_length=1)
    document_type: str = Field(..., min_length=1)
    is_public: bool = False


class ChainCase(CamelModel):
    """A case record as stored by the case-manager contract."""

    case_id: int = Field(..., ge=1)
    title: str
    description: str
    case_type: str
    client: str
    lawyer: str
    judge: str
    status: str
    filing_timestamp: int = Field(default=0, ge=0)


# ---------------------------------------------------------------------------
# Session / chain bookkeeping
# ---------------------------------------------------------------------------


class IdentityStatus(CamelModel):
    """Registry view of one address. Absence is ``is_registered=False``, not an error."""

    address: str
    is_registered: bool
    is_approved: bool
    role: str | None = None


class Session(CamelModel):
    """The authenticated identity of one browser tab."""

    session_id: str
    address: str
    role: str
    is_approved: bool
    created_at: datetime


class NetworkInfo(CamelModel):
    """The chain the provider is connected to."""

    chain_id: int
    name: str
    explorer: str


class TransactionRecord(CamelModel):
    """A confirmed chain write, as shown on the transactions page."""

    kind: str = Field(..., alias="type")
    details: str
    address: str
    tx_hash: str
    block_number: int | None = None
    timestamp: datetime


class StoredObject(CamelModel):
    """A file pinned in the object store."""

    cid: str
    url: str
    key: str
    metadata: dict[str, str]
