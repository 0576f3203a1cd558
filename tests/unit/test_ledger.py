"""Tests for the transaction log."""

from evault.services.chain import TransactionLog


def _record(log: TransactionLog, n: int, address: str = "0xAbC") -> None:
    log.record(kind="Case Registration", details=f"case {n}", address=address, tx_hash=f"0x{n:02x}", block_number=n)


class TestTransactionLog:
    def test_newest_first(self):
        log = TransactionLog()
        for n in range(3):
            _record(log, n)
        assert [e.details for e in log.entries()] == ["case 2", "case 1", "case 0"]

    def test_address_filter_is_case_insensitive(self):
        log = TransactionLog()
        _record(log, 1, "0xAbC")
        _record(log, 2, "0xdef")
        entries = log.entries(address="0xabc")
        assert [e.tx_hash for e in entries] == ["0x01"]

    def test_bounded(self):
        log = TransactionLog(max_entries=2)
        for n in range(5):
            _record(log, n)
        assert len(log) == 2
        assert [e.block_number for e in log.entries()] == [4, 3]

    def test_record_timestamps_are_utc(self):
        log = TransactionLog()
        _record(log, 1)
        assert log.entries()[0].timestamp.tzinfo is not None
