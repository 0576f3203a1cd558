"""On-disk JSON snapshots of the mock user roster and case list.

The snapshots live inside the frontend directory (``users.json`` and
``data/cases.json``) so the static pages can also fetch them directly.
They are written once, the first time the store is seeded, and are
read-only afterwards.
"""

from __future__ import annotations

import json
import random
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import TypeAdapter, ValidationError

from evault.core.exceptions import NotFoundError
from evault.models.domain import Case, CaseStatus, Role, User
from evault.services.seeding.generator import SeedPlan, generate_cases, generate_users

if TYPE_CHECKING:
    from evault.core.config import Settings

logger: structlog.stdlib.BoundLogger = structlog.get_logger()

_USERS = TypeAdapter(list[User])
_CASES = TypeAdapter(list[Case])


@dataclass(frozen=True)
class SeedResult:
    """Which snapshots ``ensure_seeded`` had to create."""

    users_created: bool
    cases_created: bool


class MockDataStore:
    """Seeds and serves the user and case snapshots."""

    def __init__(
        self,
        users_path: Path,
        cases_path: Path,
        *,
        plan: SeedPlan | None = None,
        seed: int | None = None,
    ) -> None:
        self._users_path = users_path
        self._cases_path = cases_path
        self._plan = plan or SeedPlan()
        self._seed = seed

    @classmethod
    def from_settings(cls, settings: Settings) -> MockDataStore:
        return cls(
            settings.users_path,
            settings.cases_path,
            plan=SeedPlan(gateway_url=settings.ipfs_gateway_url),
            seed=settings.seed_random_seed,
        )

    @property
    def users_path(self) -> Path:
        return self._users_path

    @property
    def cases_path(self) -> Path:
        return self._cases_path

    # -- seeding ------------------------------------------------------------

    def ensure_seeded(self) -> SeedResult:
        """Generate whichever snapshot is missing; never rewrite an existing one.

        When only the case snapshot is missing, cases are drawn from the
        roster already on disk so party names stay consistent.
        """
        rng = random.Random(self._seed)
        users_created = cases_created = False

        if self._users_path.exists():
            users = self._read_users()
        else:
            users = generate_users(self._plan, rng)
            _write_snapshot(
                self._users_path,
                _USERS.dump_python(users, mode="json", by_alias=True, exclude_none=True),
            )
            users_created = True
            logger.info("users_snapshot_created", path=str(self._users_path), count=len(users))

        if not self._cases_path.exists():
            cases = generate_cases(users, self._plan, rng)
            _write_snapshot(self._cases_path, _CASES.dump_python(cases, mode="json", by_alias=True))
            cases_created = True
            logger.info("cases_snapshot_created", path=str(self._cases_path), count=len(cases))

        return SeedResult(users_created=users_created, cases_created=cases_created)

    # -- reads --------------------------------------------------------------

    def list_users(self, *, role: Role | None = None) -> list[User]:
        """Return the roster, optionally narrowed to one role."""
        if not self._users_path.exists():
            raise NotFoundError("Users data not found", details={"path": str(self._users_path)})
        users = self._read_users()
        if role is not None:
            users = [u for u in users if u.role is role]
        return users

    def list_cases(
        self,
        *,
        status: CaseStatus | None = None,
        submitted_by: str | None = None,
        assigned_to: str | None = None,
        judge: str | None = None,
    ) -> list[Case]:
        """Return all cases, or those matching every given filter exactly."""
        if not self._cases_path.exists():
            raise NotFoundError("Cases data not found", details={"path": str(self._cases_path)})
        cases = _read_snapshot(self._cases_path, _CASES)

        if status is not None:
            cases = [c for c in cases if c.status is status]
        if submitted_by is not None:
            cases = [c for c in cases if c.submitted_by == submitted_by]
        if assigned_to is not None:
            cases = [c for c in cases if c.assigned_to == assigned_to]
        if judge is not None:
            cases = [c for c in cases if c.judge == judge]
        return cases

    def _read_users(self) -> list[User]:
        return _read_snapshot(self._users_path, _USERS)


# ---------------------------------------------------------------------------
# File helpers
# ---------------------------------------------------------------------------


def _read_snapshot(path: Path, adapter: TypeAdapter[Any]) -> Any:
    try:
        return adapter.validate_json(path.read_bytes())
    except (OSError, ValidationError) as exc:
        raise NotFoundError(f"Snapshot {path.name} is unreadable", details={"path": str(path)}) from exc


def _write_snapshot(path: Path, payload: Any) -> None:
    """Write through a sibling temp file, then rename over ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    tmp.replace(path)

