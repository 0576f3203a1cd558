"""Shared test fixtures, factories, and in-memory chain fakes.

Factories return valid domain objects with sensible defaults. Override
any field via keyword arguments to create specific test scenarios
without repeating boilerplate. The fake web3 objects mimic just enough
of AsyncWeb3 and its contract bindings for ChainBridge: awaitable
``eth.accounts`` / ``eth.chain_id``, ``functions.<name>(*args).call()``
and ``.transact()``, receipts, and CaseCreated event decoding.
"""

from __future__ import annotations

import itertools
from collections.abc import AsyncIterator
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from web3.exceptions import ContractLogicError

from evault.api.app import create_app
from evault.core.config import Settings
from evault.models.domain import (
    Case,
    CaseStatus,
    Document,
    Event,
    IdentityStatus,
    Role,
    Session,
    User,
)
from evault.services.chain import ChainBridge, TransactionLog
from evault.services.storage import DocumentUploadBridge, FilebaseStorage

ADMIN_ADDRESS = "0x00000000000000000000000000000000000000ad"
CLIENT_ADDRESS = "0x1111111111111111111111111111111111111111"
LAWYER_ADDRESS = "0x2222222222222222222222222222222222222222"
JUDGE_ADDRESS = "0x3333333333333333333333333333333333333333"
STRANGER_ADDRESS = "0x4444444444444444444444444444444444444444"

FAKE_CID = "QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG"

# ---------------------------------------------------------------------------
# Settings / App / Client
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings rooted in a temp directory, console logs, debug enabled."""
    return Settings(
        debug=True,
        frontend_dir=tmp_path / "frontend",
        upload_dir=tmp_path / "uploads",
        seed_random_seed=7,
        filebase_bucket="evault-test",
        filebase_api_key="test-key",
        filebase_secret_key="test-secret",
        admin_address=ADMIN_ADDRESS,
        max_upload_bytes=1024,
        log_format="console",
        log_level="DEBUG",
    )


@pytest.fixture
def app(test_settings: Settings) -> FastAPI:
    """FastAPI application wired with test settings."""
    return create_app(test_settings)


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Async HTTP client bound to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ---------------------------------------------------------------------------
# Fake web3
# ---------------------------------------------------------------------------


async def _resolve(value: Any) -> Any:
    if isinstance(value, BaseException):
        raise value
    return value


class FakeEth:
    """The slice of ``AsyncWeb3.eth`` ChainBridge touches."""

    def __init__(self, accounts: list[str] | BaseException, chain_id: int = 1337) -> None:
        self.account_result = accounts
        self.chain_id_result: int | BaseException = chain_id
        self.receipts: dict[bytes, dict[str, Any]] = {}
        self._blocks = itertools.count(1)
        self._hashes = itertools.count(1)

    @property
    def accounts(self) -> Any:
        return _resolve(self.account_result)

    @property
    def chain_id(self) -> Any:
        return _resolve(self.chain_id_result)

    async def wait_for_transaction_receipt(self, tx_hash: bytes, timeout: float = 120) -> dict[str, Any]:
        return self.receipts[tx_hash]

    def mine(self, *, status: int = 1, events: list[dict[str, Any]] | None = None) -> bytes:
        tx_hash = next(self._hashes).to_bytes(32, "big")
        self.receipts[tx_hash] = {
            "transactionHash": tx_hash,
            "blockNumber": next(self._blocks),
            "status": status,
            "events": events or [],
        }
        return tx_hash


class FakeWeb3:
    def __init__(self, accounts: list[str] | BaseException, chain_id: int = 1337) -> None:
        self.eth = FakeEth(accounts, chain_id)


class _BoundFunction:
    def __init__(self, contract: FakeContract, name: str, args: tuple[Any, ...]) -> None:
        self._contract = contract
        self._name = name
        self._args = args

    async def call(self) -> Any:
        return self._contract.handle_call(self._name, *self._args)

    async def transact(self, tx: dict[str, Any]) -> bytes:
        return self._contract.handle_transact(self._name, tx["from"], *self._args)


class _Functions:
    def __init__(self, contract: FakeContract) -> None:
        self._contract = contract

    def __getattr__(self, name: str) -> Any:
        return lambda *args: _BoundFunction(self._contract, name, args)


class _CaseCreatedDecoder:
    def process_receipt(self, receipt: dict[str, Any], errors: Any = None) -> list[dict[str, Any]]:
        return list(receipt.get("events", []))


class _Events:
    def CaseCreated(self) -> _CaseCreatedDecoder:  # noqa: N802
        return _CaseCreatedDecoder()


class FakeContract:
    """Base for contract fakes: dispatches to ``call_<fn>`` / ``tx_<fn>`` methods."""

    def __init__(self, eth: FakeEth) -> None:
        self.eth = eth
        self.functions = _Functions(self)
        self.events = _Events()
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def handle_call(self, name: str, *args: Any) -> Any:
        self.calls.append((name, args))
        return getattr(self, f"call_{name}")(*args)

    def handle_transact(self, name: str, sender: str, *args: Any) -> bytes:
        self.calls.append((name, args))
        return getattr(self, f"tx_{name}")(sender.lower(), *args)


class FakeUserRegistry(FakeContract):
    """In-memory identity registry that reverts like the real contract."""

    def __init__(self, eth: FakeEth) -> None:
        super().__init__(eth)
        self.users: dict[str, dict[str, Any]] = {}

    def add(self, address: str, role: str, *, approved: bool = True, id_number: str = "") -> None:
        self.users[address.lower()] = {"role": role, "approved": approved, "id": id_number}

    def call_isUserRegistered(self, address: str) -> bool:  # noqa: N802
        return address.lower() in self.users

    def call_isUserApproved(self, address: str) -> bool:  # noqa: N802
        return bool(self.users.get(address.lower(), {}).get("approved", False))

    def call_getUserRole(self, address: str) -> str:  # noqa: N802
        return str(self.users.get(address.lower(), {}).get("role", ""))

    def _register(self, sender: str, role: str, id_number: str = "") -> bytes:
        if sender in self.users:
            raise ContractLogicError("execution reverted: User already registered")
        if id_number and any(u["id"] == id_number for u in self.users.values()):
            raise ContractLogicError(f"execution reverted: ID {id_number} already in use")
        self.users[sender] = {"role": role, "approved": False, "id": id_number}
        return self.eth.mine()

    def tx_registerAsClient(self, sender: str, name: str, email: str) -> bytes:  # noqa: N802
        return self._register(sender, "client")

    def tx_registerAsLawyer(self, sender: str, name: str, email: str, bar_id: str) -> bytes:  # noqa: N802
        return self._register(sender, "lawyer", bar_id)

    def tx_registerAsJudge(self, sender: str, name: str, email: str, judicial_id: str) -> bytes:  # noqa: N802
        return self._register(sender, "judge", judicial_id)


class FakeCaseManager(FakeContract):
    """In-memory case manager emitting CaseCreated in its receipts."""

    def __init__(self, eth: FakeEth) -> None:
        super().__init__(eth)
        self.cases: dict[int, tuple[Any, ...]] = {}
        self.documents: dict[int, list[tuple[Any, ...]]] = {}
        self.revert_reason: str | None = None

    def tx_createCase(  # noqa: N802
        self,
        sender: str,
        title: str,
        description: str,
        case_type: str,
        client: str,
        lawyer: str,
        judge: str,
    ) -> bytes:
        self._maybe_revert()
        case_id = len(self.cases) + 1
        self.cases[case_id] = (
            case_id, title, description, case_type, client, lawyer, judge, "Registered", 1_700_000_000,
        )
        return self.eth.mine(events=[{"args": {"caseId": case_id, "client": client, "title": title}}])

    def tx_addDocument(  # noqa: N802
        self,
        sender: str,
        case_id: int,
        name: str,
        cid: str,
        document_type: str,
        is_public: bool,
    ) -> bytes:
        self._maybe_revert()
        self.documents.setdefault(case_id, []).append((name, cid, document_type, is_public))
        return self.eth.mine()

    def call_getCaseDetails(self, case_id: int) -> tuple[Any, ...]:  # noqa: N802
        empty = (0, "", "", "", "0x" + "0" * 40, "0x" + "0" * 40, "0x" + "0" * 40, "", 0)
        return self.cases.get(case_id, empty)

    def _party_cases(self, index: int, address: str) -> list[int]:
        return [cid for cid, row in self.cases.items() if row[index].lower() == address.lower()]

    def call_getClientCases(self, address: str) -> list[int]:  # noqa: N802
        return self._party_cases(4, address)

    def call_getLawyerCases(self, address: str) -> list[int]:  # noqa: N802
        return self._party_cases(5, address)

    def call_getJudgeCases(self, address: str) -> list[int]:  # noqa: N802
        return self._party_cases(6, address)

    def _maybe_revert(self) -> None:
        if self.revert_reason is not None:
            raise ContractLogicError(f"execution reverted: {self.revert_reason}")


@pytest.fixture
def fake_web3() -> FakeWeb3:
    return FakeWeb3([CLIENT_ADDRESS, LAWYER_ADDRESS, JUDGE_ADDRESS])


@pytest.fixture
def registry(fake_web3: FakeWeb3) -> FakeUserRegistry:
    return FakeUserRegistry(fake_web3.eth)


@pytest.fixture
def case_manager(fake_web3: FakeWeb3) -> FakeCaseManager:
    return FakeCaseManager(fake_web3.eth)


@pytest.fixture
def bridge(fake_web3: FakeWeb3, registry: FakeUserRegistry, case_manager: FakeCaseManager) -> ChainBridge:
    """ChainBridge over the in-memory fakes."""
    return ChainBridge(
        fake_web3,  # type: ignore[arg-type]
        user_registry=registry,
        case_manager=case_manager,
        receipt_timeout=5.0,
        ledger=TransactionLog(),
    )


# ---------------------------------------------------------------------------
# Storage fakes
# ---------------------------------------------------------------------------


class FakeUpload:
    """Stands in for fastapi.UploadFile: ``read`` yields the payload in chunks."""

    def __init__(self, filename: str | None, payload: bytes, content_type: str = "application/pdf") -> None:
        self.filename = filename
        self.content_type = content_type
        self._payload = payload
        self._offset = 0

    async def read(self, size: int = -1) -> bytes:
        if size < 0:
            size = len(self._payload) - self._offset
        chunk = self._payload[self._offset : self._offset + size]
        self._offset += len(chunk)
        return chunk


def make_s3_client(cid: str = FAKE_CID) -> MagicMock:
    """A boto3 S3 client double whose put_object reports ``cid`` like Filebase does."""
    s3 = MagicMock()
    s3.put_object.return_value = {
        "ETag": '"d41d8cd98f00b204e9800998ecf8427e"',
        "ResponseMetadata": {"HTTPHeaders": {"x-amz-meta-cid": cid}},
    }
    s3.delete_object.return_value = {}
    return s3


def make_storage(s3: MagicMock | None = None) -> FilebaseStorage:
    return FilebaseStorage(
        s3 if s3 is not None else make_s3_client(),
        bucket="evault-test",
        gateway_url="https://ipfs.filebase.io/ipfs",
    )


def make_upload_bridge(
    tmp_path: Path,
    chain: ChainBridge,
    *,
    storage: FilebaseStorage | None = None,
    max_bytes: int = 1024,
) -> DocumentUploadBridge:
    return DocumentUploadBridge(
        storage if storage is not None else make_storage(),
        chain,
        upload_dir=tmp_path / "uploads",
        max_bytes=max_bytes,
    )


# ---------------------------------------------------------------------------
# Domain model factories
# ---------------------------------------------------------------------------


def make_user(**overrides: object) -> User:
    """Build a valid lawyer User with sensible defaults."""
    defaults: dict[str, object] = {
        "address": LAWYER_ADDRESS,
        "name": "John Doe",
        "email": "john.doe@lawfirm.com",
        "role": Role.LAWYER,
        "bar_id": "BAR001",
        "is_registered": True,
        "is_approved": True,
    }
    defaults.update(overrides)
    return User(**defaults)  # type: ignore[arg-type]


def make_document(**overrides: object) -> Document:
    defaults: dict[str, object] = {
        "name": "Contract_Agreement.pdf",
        "content_identifier": FAKE_CID,
        "url": f"https://ipfs.filebase.io/ipfs/{FAKE_CID}",
        "uploaded_by": "Alice Brown",
        "upload_date": date(2023, 10, 15),
        "document_type": "pdf",
    }
    defaults.update(overrides)
    return Document(**defaults)  # type: ignore[arg-type]


def make_case(**overrides: object) -> Case:
    """Build a valid Case with sensible defaults."""
    defaults: dict[str, object] = {
        "id": 1,
        "title": "ABC Corp vs. Property Developer",
        "description": "Property dispute over commercial real estate.",
        "case_type": "Civil - Property Dispute",
        "submitted_by": "Alice Brown",
        "assigned_to": "John Doe",
        "judge": "Judge Smith",
        "status": CaseStatus.IN_PROGRESS,
        "filing_date": date(2023, 10, 15),
        "next_hearing": date(2023, 12, 10),
        "court_room": "Room 302, District Court",
        "documents": (make_document(),),
        "history": (Event(occurred_on=date(2023, 10, 15), action="Case Filed", by="Alice Brown"),),
    }
    defaults.update(overrides)
    return Case(**defaults)  # type: ignore[arg-type]


def make_session(**overrides: object) -> Session:
    defaults: dict[str, object] = {
        "session_id": "test-session",
        "address": CLIENT_ADDRESS,
        "role": "client",
        "is_approved": True,
        "created_at": datetime(2024, 1, 15, 10, 30, tzinfo=UTC),
    }
    defaults.update(overrides)
    return Session(**defaults)  # type: ignore[arg-type]


def make_identity(**overrides: object) -> IdentityStatus:
    defaults: dict[str, object] = {
        "address": CLIENT_ADDRESS,
        "is_registered": True,
        "is_approved": True,
        "role": "client",
    }
    defaults.update(overrides)
    return IdentityStatus(**defaults)  # type: ignore[arg-type]
