"""API request schemas.

Every inbound JSON body is validated through one of these models. Keys are
camelCase on the wire, matching what the dashboards send.
"""

from __future__ import annotations

from pydantic import Field

from evault.models.domain import CamelModel, Role

# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


class RegisterIdentityRequest(CamelModel):
    """Self-registration of the signing wallet as client, lawyer, or judge."""

    name: str = Field(..., min_length=1, max_length=200)
    email: str = ""
    role: Role
    id_number: str | None = Field(
        default=None,
        description="Bar ID for lawyers, judicial ID for judges",
    )
    account: str | None = Field(
        default=None,
        description="Signing account; defaults to the provider's active account",
    )


# ---------------------------------------------------------------------------
# Cases
# ---------------------------------------------------------------------------


class SubmitCaseRequest(CamelModel):
    """A new case to register on chain."""

    title: str = Field(..., min_length=1, max_length=500)
    description: str = ""
    case_type: str = Field(..., min_length=1)
    client: str = Field(..., min_length=1)
    lawyer: str = Field(..., min_length=1)
    judge: str = Field(..., min_length=1)
    account: str | None = None
