"""Async bridge to the wallet provider and the E-Vault contracts.

ChainBridge wraps an AsyncWeb3 instance and two contract bindings (the
identity registry and the case manager). Reads map RPC and contract
failures to ChainError and report absence as plain False/None. Writes
are signed by a provider-managed account, wait for the receipt, pass
through a single-flight guard, and land in the transaction log once
confirmed.
"""

from __future__ import annotations

import asyncio
import re
from typing import TYPE_CHECKING, Any

import structlog
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception
from web3.logs import DISCARD

from evault.core.exceptions import (
    AlreadyRegistered,
    ChainError,
    DuplicateId,
    InvalidIdentity,
    NotConnected,
    NotFoundError,
    UserRejected,
    WalletUnavailable,
)
from evault.models.domain import (
    ChainCase,
    DocumentMetadata,
    IdentityStatus,
    NetworkInfo,
    Role,
    TransactionRecord,
)
from evault.services.chain.abi import CASE_MANAGER_ABI, USER_REGISTRY_ABI, network_for
from evault.services.chain.ledger import TransactionLog
from evault.services.chain.single_flight import SingleFlight

if TYPE_CHECKING:
    from evault.core.config import Settings

logger: structlog.stdlib.BoundLogger = structlog.get_logger()

# Provider transport failures: aiohttp connection errors subclass OSError,
# JSON-RPC error responses surface as ValueError subclasses.
_TRANSPORT_ERRORS = (Web3Exception, ValueError, OSError, asyncio.TimeoutError)

_USER_REJECTED_CODE = 4001

_REGISTER_FUNCTIONS = {
    Role.CLIENT: "registerAsClient",
    Role.LAWYER: "registerAsLawyer",
    Role.JUDGE: "registerAsJudge",
}
_CASE_LIST_FUNCTIONS = {
    Role.CLIENT: "getClientCases",
    Role.LAWYER: "getLawyerCases",
    Role.JUDGE: "getJudgeCases",
}

_DUPLICATE_ID_PATTERN = re.compile(r"\b(bar|judicial)?\s*id\b.*\b(already|taken|in use|exists)\b|duplicate")
_ALREADY_REGISTERED_PATTERN = re.compile(r"already\s+registered")


class ChainBridge:
    """Wallet and contract access for the API layer."""

    def __init__(
        self,
        w3: AsyncWeb3 | None,
        *,
        user_registry: Any | None = None,
        case_manager: Any | None = None,
        receipt_timeout: float = 120.0,
        ledger: TransactionLog | None = None,
    ) -> None:
        self._w3 = w3
        self._user_registry = user_registry
        self._case_manager = case_manager
        self._receipt_timeout = receipt_timeout
        self._ledger = ledger if ledger is not None else TransactionLog()
        self._single_flight = SingleFlight()
        self._accounts: list[str] = []

    @classmethod
    def from_settings(cls, settings: Settings, ledger: TransactionLog | None = None) -> ChainBridge:
        """Build the bridge; an empty ETH_RPC_URL yields a bridge with no provider."""
        if not settings.eth_rpc_url:
            return cls(None, receipt_timeout=settings.tx_receipt_timeout_seconds, ledger=ledger)

        w3 = AsyncWeb3(AsyncHTTPProvider(settings.eth_rpc_url))
        user_registry = None
        case_manager = None
        if settings.user_registry_address:
            user_registry = w3.eth.contract(
                address=AsyncWeb3.to_checksum_address(settings.user_registry_address),
                abi=USER_REGISTRY_ABI,
            )
        if settings.case_manager_address:
            case_manager = w3.eth.contract(
                address=AsyncWeb3.to_checksum_address(settings.case_manager_address),
                abi=CASE_MANAGER_ABI,
            )
        return cls(
            w3,
            user_registry=user_registry,
            case_manager=case_manager,
            receipt_timeout=settings.tx_receipt_timeout_seconds,
            ledger=ledger,
        )

    @property
    def ledger(self) -> TransactionLog:
        return self._ledger

    @property
    def active_account(self) -> str | None:
        return self._accounts[0] if self._accounts else None

    # -- wallet -------------------------------------------------------------

    async def connect(self) -> list[str]:
        """Request account access; the first account becomes the signer."""
        w3 = self._require_provider()
        try:
            accounts = await w3.eth.accounts
        except _TRANSPORT_ERRORS as exc:
            if _rpc_error_code(exc) == _USER_REJECTED_CODE:
                raise UserRejected("Account access request was declined") from exc
            raise WalletUnavailable(f"Wallet provider is unreachable: {exc}") from exc

        self._accounts = [str(a) for a in accounts]
        logger.info("wallet_connected", accounts=len(self._accounts), active=self.active_account)
        return list(self._accounts)

    async def network_info(self) -> NetworkInfo:
        w3 = self._require_provider()
        try:
            chain_id = await w3.eth.chain_id
        except _TRANSPORT_ERRORS as exc:
            raise ChainError(f"Could not read chain id: {exc}") from exc
        return network_for(int(chain_id))

    # -- identity reads -----------------------------------------------------

    async def is_registered(self, address: str) -> bool:
        registry = self._require_contract(self._user_registry, "user registry")
        return bool(await self._call(registry, "isUserRegistered", _checksum(address)))

    async def is_approved(self, address: str) -> bool:
        registry = self._require_contract(self._user_registry, "user registry")
        return bool(await self._call(registry, "isUserApproved", _checksum(address)))

    async def fetch_role(self, address: str) -> str | None:
        """The registry's role string for ``address``, or None if it has none."""
        registry = self._require_contract(self._user_registry, "user registry")
        role = str(await self._call(registry, "getUserRole", _checksum(address))).strip().lower()
        return role or None

    async def fetch_identity(self, address: str) -> IdentityStatus:
        registered = await self.is_registered(address)
        if not registered:
            return IdentityStatus(address=address, is_registered=False, is_approved=False)
        return IdentityStatus(
            address=address,
            is_registered=True,
            is_approved=await self.is_approved(address),
            role=await self.fetch_role(address),
        )

    # -- identity writes ----------------------------------------------------

    async def register_identity(
        self,
        name: str,
        role: Role | str,
        id_number: str | None = None,
        *,
        email: str = "",
        account: str | None = None,
    ) -> TransactionRecord:
        """Register the signing account as a client, lawyer, or judge."""
        try:
            role = Role(role)
        except ValueError as exc:
            raise InvalidIdentity(f"Unknown role '{role}'") from exc
        if role not in _REGISTER_FUNCTIONS:
            raise InvalidIdentity(f"Role '{role}' cannot self-register")
        if not name.strip():
            raise InvalidIdentity("Name is required")
        if role in (Role.LAWYER, Role.JUDGE) and not (id_number and id_number.strip()):
            label = "Bar ID" if role is Role.LAWYER else "Judicial ID"
            raise InvalidIdentity(f"{label} is required for role '{role}'")

        registry = self._require_contract(self._user_registry, "user registry")
        sender = await self._sender(account)
        args: tuple[str, ...] = (name, email)
        if role is not Role.CLIENT:
            args = (*args, id_number or "")

        async def _register() -> TransactionRecord:
            if await self.is_registered(sender):
                raise AlreadyRegistered(
                    "This wallet address is already registered",
                    details={"address": sender},
                )
            receipt = await self._transact(registry, _REGISTER_FUNCTIONS[role], *args, sender=sender)
            return self._record(
                receipt,
                kind="User Registration",
                details=f"{name} registered as {role}",
                address=sender,
            )

        return await self._single_flight.run(("register", sender), (role, *args), _register)

    # -- cases --------------------------------------------------------------

    async def submit_case(
        self,
        title: str,
        description: str,
        case_type: str,
        client: str,
        lawyer: str,
        judge: str,
        *,
        account: str | None = None,
    ) -> int:
        """Create a case on chain and return the id from its CaseCreated event."""
        manager = self._require_contract(self._case_manager, "case manager")
        sender = await self._sender(account)
        args = (title, description, case_type, _checksum(client), _checksum(lawyer), _checksum(judge))

        async def _submit() -> int:
            receipt = await self._transact(manager, "createCase", *args, sender=sender)
            events = manager.events.CaseCreated().process_receipt(receipt, errors=DISCARD)
            if not events:
                raise ChainError(
                    "Case transaction confirmed without a CaseCreated event",
                    details={"tx_hash": _tx_hash(receipt)},
                )
            case_id = int(events[0]["args"]["caseId"])
            self._record(
                receipt,
                kind="Case Registration",
                details=f"Case #{case_id} '{title}' registered",
                address=sender,
            )
            return case_id

        return await self._single_flight.run(("submit_case", sender), args, _submit)

    async def get_case(self, case_id: int) -> ChainCase:
        manager = self._require_contract(self._case_manager, "case manager")
        raw = await self._call(manager, "getCaseDetails", case_id)
        if not raw or int(raw[0]) == 0:
            raise NotFoundError(f"Case {case_id} not found on chain", details={"case_id": case_id})
        return ChainCase(
            case_id=int(raw[0]),
            title=raw[1],
            description=raw[2],
            case_type=raw[3],
            client=raw[4],
            lawyer=raw[5],
            judge=raw[6],
            status=raw[7],
            filing_timestamp=int(raw[8]),
        )

    async def fetch_case_ids(self, address: str, role: str) -> list[int]:
        """Case ids linked to ``address`` in its role; admins and unknown roles have none."""
        function = _CASE_LIST_FUNCTIONS.get(role)
        if function is None:
            return []
        manager = self._require_contract(self._case_manager, "case manager")
        return [int(i) for i in await self._call(manager, function, _checksum(address))]

    async def record_document(
        self,
        case_id: int,
        content_identifier: str,
        metadata: DocumentMetadata,
        *,
        account: str | None = None,
    ) -> TransactionRecord:
        """Append a document reference to the case's on-chain document list."""
        manager = self._require_contract(self._case_manager, "case manager")
        sender = await self._sender(account)
        args = (case_id, metadata.name, content_identifier, metadata.document_type, metadata.is_public)

        async def _add() -> TransactionRecord:
            receipt = await self._transact(manager, "addDocument", *args, sender=sender)
            return self._record(
                receipt,
                kind="Document Upload",
                details=f"{metadata.name} added to case #{case_id}",
                address=sender,
            )

        return await self._single_flight.run(("record_document", sender), args, _add)

    # -- internals ----------------------------------------------------------

    def _require_provider(self) -> AsyncWeb3:
        if self._w3 is None:
            raise WalletUnavailable("No wallet provider is configured")
        return self._w3

    def _require_contract(self, contract: Any | None, label: str) -> Any:
        self._require_provider()
        if contract is None:
            raise ChainError(f"The {label} contract address is not configured")
        return contract

    async def _sender(self, account: str | None) -> str:
        if account:
            return _checksum(account)
        if self.active_account is None:
            await self.connect()
        if self.active_account is None:
            raise NotConnected("No wallet account is available to sign the transaction")
        return self.active_account

    async def _call(self, contract: Any, function: str, *args: Any) -> Any:
        try:
            return await getattr(contract.functions, function)(*args).call()
        except ContractLogicError as exc:
            raise ChainError(f"{function} reverted: {_revert_reason(exc)}") from exc
        except _TRANSPORT_ERRORS as exc:
            raise ChainError(f"{function} call failed: {exc}") from exc

    async def _transact(self, contract: Any, function: str, *args: Any, sender: str) -> Any:
        w3 = self._require_provider()
        log = logger.bind(function=function, sender=sender)
        try:
            tx_hash = await getattr(contract.functions, function)(*args).transact({"from": sender})
            log.info("chain_transaction_sent", tx_hash=AsyncWeb3.to_hex(tx_hash))
            receipt = await w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self._receipt_timeout)
        except ContractLogicError as exc:
            raise _revert_error(function, exc) from exc
        except TimeExhausted as exc:
            raise ChainError(
                f"{function} was not confirmed within {self._receipt_timeout:.0f}s",
                details={"function": function},
            ) from exc
        except _TRANSPORT_ERRORS as exc:
            raise ChainError(f"{function} transaction failed: {exc}") from exc

        if receipt["status"] != 1:
            raise ChainError(
                f"{function} reverted",
                details={"tx_hash": _tx_hash(receipt), "block_number": receipt["blockNumber"]},
            )
        log.info("chain_transaction_confirmed", tx_hash=_tx_hash(receipt), block=receipt["blockNumber"])
        return receipt

    def _record(self, receipt: Any, *, kind: str, details: str, address: str) -> TransactionRecord:
        return self._ledger.record(
            kind=kind,
            details=details,
            address=address,
            tx_hash=_tx_hash(receipt),
            block_number=int(receipt["blockNumber"]),
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _checksum(address: str) -> str:
    try:
        return AsyncWeb3.to_checksum_address(address)
    except (ValueError, TypeError) as exc:
        raise InvalidIdentity(f"'{address}' is not a valid address") from exc


def _tx_hash(receipt: Any) -> str:
    return AsyncWeb3.to_hex(receipt["transactionHash"])


def _revert_reason(exc: ContractLogicError) -> str:
    message = getattr(exc, "message", None) or str(exc)
    return message.removeprefix("execution reverted: ").strip()


def _revert_error(function: str, exc: ContractLogicError) -> Exception:
    reason = _revert_reason(exc)
    lowered = reason.lower()
    if _DUPLICATE_ID_PATTERN.search(lowered):
        return DuplicateId(reason, details={"function": function})
    if _ALREADY_REGISTERED_PATTERN.search(lowered):
        return AlreadyRegistered(reason, details={"function": function})
    return ChainError(f"{function} reverted: {reason}", details={"function": function})


def _rpc_error_code(exc: BaseException) -> int | None:
    """Extract the JSON-RPC error code from a provider exception, if any."""
    candidates: list[Any] = [getattr(exc, "rpc_response", None), *exc.args]
    for candidate in candidates:
        if not isinstance(candidate, dict):
            continue
        error = candidate.get("error", candidate)
        if isinstance(error, dict) and isinstance(error.get("code"), int):
            return int(error["code"])
    return None
