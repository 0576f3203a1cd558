"""Mock roster and case data: generation and on-disk snapshots."""

from evault.services.seeding.generator import SeedPlan, generate_cases, generate_users
from evault.services.seeding.store import MockDataStore, SeedResult

__all__ = [
    "MockDataStore",
    "SeedPlan",
    "SeedResult",
    "generate_cases",
    "generate_users",
]
