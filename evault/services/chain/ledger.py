"""In-memory log of confirmed chain writes, newest first."""

from __future__ import annotations

from collections import deque
from datetime import UTC, datetime

from evault.models.domain import TransactionRecord


class TransactionLog:
    """Bounded record of the transactions this process has confirmed."""

    def __init__(self, max_entries: int = 1000) -> None:
        self._entries: deque[TransactionRecord] = deque(maxlen=max_entries)

    def record(
        self,
        *,
        kind: str,
        details: str,
        address: str,
        tx_hash: str,
        block_number: int | None = None,
    ) -> TransactionRecord:
        entry = TransactionRecord(
            kind=kind,
            details=details,
            address=address,
            tx_hash=tx_hash,
            block_number=block_number,
            timestamp=datetime.now(UTC),
        )
        self._entries.append(entry)
        return entry

    def entries(self, *, address: str | None = None) -> list[TransactionRecord]:
        entries = reversed(self._entries)
        if address is None:
            return list(entries)
        wanted = address.lower()
        return [e for e in entries if e.address.lower() == wanted]

    def __len__(self) -> int:
        return len(self._entries)
