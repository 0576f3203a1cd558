"""Wallet provider and smart-contract access."""

from evault.services.chain.bridge import ChainBridge
from evault.services.chain.ledger import TransactionLog
from evault.services.chain.single_flight import SingleFlight

__all__ = ["ChainBridge", "SingleFlight", "TransactionLog"]
