"""Synthetic roster and case generation for the mock data store.

Produces a fixed-shape dataset: a handful of named judges, lawyers, clients
and cases, topped up with records drawn uniformly from fixed name,
specialization and case-type pools. Counts are deterministic; field values
come from the supplied ``random.Random`` so a seeded generator reproduces
the same dataset.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import date, timedelta

from evault.models.domain import Case, CaseStatus, Document, Event, Role, User

FIRST_NAMES = (
    "James", "John", "Robert", "Michael", "William", "David", "Richard", "Joseph",
    "Thomas", "Charles", "Mary", "Patricia", "Jennifer", "Linda", "Elizabeth",
    "Barbara", "Susan", "Jessica", "Sarah", "Karen",
)  # fmt: skip
LAST_NAMES = (
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Miller", "Davis", "Garcia",
    "Rodriguez", "Wilson", "Martinez", "Anderson", "Taylor", "Thomas", "Hernandez",
    "Moore", "Martin", "Jackson", "Thompson", "White",
)  # fmt: skip
SPECIALIZATIONS = (
    "Corporate Law", "Criminal Law", "Family Law", "Property Law", "Intellectual Property",
    "Tax Law", "Environmental Law", "Labor Law", "Immigration Law", "Constitutional Law",
)  # fmt: skip
CASE_TYPES = (
    "Civil - Property Dispute",
    "Civil - Contract Breach",
    "Civil - Intellectual Property",
    "Civil - Personal Injury",
    "Criminal - Fraud",
    "Criminal - Theft",
    "Family - Divorce",
    "Family - Child Custody",
    "Corporate - Merger",
    "Corporate - Acquisition",
)

_BASE58 = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"

# (name, id, email, experience, specialization)
_FIXED_JUDGES = (
    ("Judge Smith", "JID001", "judge.smith@judiciary.gov", "15 years", "Corporate Law"),
    ("Judge Patel", "JID002", "judge.patel@judiciary.gov", "12 years", "Criminal Law"),
)
_FIXED_LAWYERS = (
    ("John Doe", "BAR001", "john.doe@lawfirm.com", "10 years", "Corporate Law"),
    ("Jane Smith", "BAR002", "jane.smith@lawfirm.com", "8 years", "Family Law"),
    ("Robert Johnson", "BAR003", "robert.johnson@lawfirm.com", "12 years", "Property Law"),
)
# (name, email, company)
_FIXED_CLIENTS = (
    ("Alice Brown", "alice.brown@example.com", "ABC Corporation"),
    ("Bob Wilson", "bob.wilson@example.com", "XYZ Enterprises"),
)


@dataclass(frozen=True)
class _FixedCase:
    title: str
    description: str
    client: str
    lawyer: str
    judge: str
    status: CaseStatus
    filing_date: date
    next_hearing: date
    case_type: str
    court_room: str
    documents: tuple[tuple[str, str, date], ...]
    history: tuple[tuple[date, str, str], ...]


_FIXED_CASES = (
    _FixedCase(
        title="ABC Corp vs. Property Developer",
        description=(
            "Property dispute case involving commercial real estate in downtown business "
            "district. The client claims breach of purchase agreement and seeks damages."
        ),
        client="Alice Brown",
        lawyer="John Doe",
        judge="Judge Smith",
        status=CaseStatus.IN_PROGRESS,
        filing_date=date(2023, 10, 15),
        next_hearing=date(2023, 12, 10),
        case_type="Civil - Property Dispute",
        court_room="Room 302, District Court",
        documents=(
            ("Contract_Agreement.pdf", "Alice Brown", date(2023, 10, 15)),
            ("Property_Deed.pdf", "John Doe", date(2023, 10, 16)),
            ("Evidence_Photos.pdf", "John Doe", date(2023, 10, 20)),
        ),
        history=(
            (date(2023, 10, 15), "Case Filed", "Alice Brown"),
            (date(2023, 10, 16), "Case Assigned to Judge", "System"),
            (date(2023, 10, 20), "Status Changed to In Progress", "Judge Smith"),
            (date(2023, 10, 25), "Hearing Scheduled", "Court Clerk"),
        ),
    ),
    _FixedCase(
        title="XYZ Enterprises vs. Software Inc.",
        description=(
            "Contract breach case regarding software development project. The client claims "
            "the delivered software does not meet the agreed specifications."
        ),
        client="Bob Wilson",
        lawyer="Jane Smith",
        judge="Judge Patel",
        status=CaseStatus.SCHEDULED,
        filing_date=date(2023, 10, 20),
        next_hearing=date(2023, 12, 15),
        case_type="Civil - Contract Breach",
        court_room="Room 405, District Court",
        documents=(
            ("Contract.pdf", "Bob Wilson", date(2023, 10, 20)),
            ("Project_Specifications.pdf", "Jane Smith", date(2023, 10, 22)),
            ("Email_Communications.pdf", "Jane Smith", date(2023, 10, 25)),
        ),
        history=(
            (date(2023, 10, 20), "Case Filed", "Bob Wilson"),
            (date(2023, 10, 21), "Case Assigned to Judge", "System"),
            (date(2023, 10, 23), "Status Changed to Scheduled", "Judge Patel"),
            (date(2023, 10, 26), "Hearing Scheduled", "Court Clerk"),
        ),
    ),
    _FixedCase(
        title="ABC Corp vs. Supplier Co.",
        description=(
            "Contract dispute regarding supply of materials. The client claims the supplied "
            "materials were defective and caused production delays."
        ),
        client="Alice Brown",
        lawyer="Robert Johnson",
        judge="Judge Smith",
        status=CaseStatus.REGISTERED,
        filing_date=date(2023, 10, 25),
        next_hearing=date(2023, 12, 20),
        case_type="Civil - Contract Breach",
        court_room="Room 302, District Court",
        documents=(
            ("Supply_Contract.pdf", "Alice Brown", date(2023, 10, 25)),
            ("Quality_Report.pdf", "Robert Johnson", date(2023, 10, 27)),
        ),
        history=(
            (date(2023, 10, 25), "Case Filed", "Alice Brown"),
            (date(2023, 10, 26), "Case Assigned to Judge", "System"),
            (date(2023, 10, 28), "Status Changed to Registered", "Judge Smith"),
        ),
    ),
)


@dataclass(frozen=True)
class SeedPlan:
    """How many records of each kind to generate, and the date window for cases."""

    judges: int = 25
    lawyers: int = 50
    clients: int = 30
    cases: int = 100
    start: date = date(2023, 1, 1)
    end: date = date(2023, 12, 31)
    gateway_url: str = "https://ipfs.filebase.io/ipfs"

    def __post_init__(self) -> None:
        if min(self.judges, self.lawyers, self.clients, self.cases) < 0:
            raise ValueError("seed counts must be non-negative")
        if self.end < self.start:
            raise ValueError("seed date window is empty")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def wallet_address(index: int) -> str:
    """Deterministic placeholder wallet address for roster slot ``index``."""
    return f"0x{index:040x}"


def fake_cid(rng: random.Random) -> str:
    """A CIDv0-shaped identifier (``Qm`` + 44 base58 characters)."""
    return "Qm" + "".join(rng.choices(_BASE58, k=44))


def random_name(rng: random.Random) -> str:
    return f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}"


def random_date(rng: random.Random, start: date, end: date) -> date:
    """Uniformly random day in the closed range [start, end]."""
    if end <= start:
        return start
    return start + timedelta(days=rng.randint(0, (end - start).days))


def _email_local_part(name: str) -> str:
    return ".".join(name.lower().split())


def _sequence_id(prefix: str, n: int) -> str:
    return f"{prefix}{n:03d}"


# ---------------------------------------------------------------------------
# Roster
# ---------------------------------------------------------------------------


def generate_users(plan: SeedPlan, rng: random.Random) -> list[User]:
    """Build the roster: judges first, then lawyers, then clients.

    Fixed records fill the first slots of each role; the remainder up to the
    planned count is generated. Wallet addresses follow roster order.
    """
    users: list[User] = []

    def next_address() -> str:
        return wallet_address(len(users) + 1)

    for n in range(1, plan.judges + 1):
        if n <= len(_FIXED_JUDGES):
            name, judicial_id, email, experience, specialization = _FIXED_JUDGES[n - 1]
        else:
            name = f"Judge {random_name(rng)}"
            judicial_id = _sequence_id("JID", n)
            email = f"{_email_local_part(name)}@judiciary.gov"
            experience = f"{rng.randint(5, 24)} years"
            specialization = rng.choice(SPECIALIZATIONS)
        users.append(
            User(
                address=next_address(),
                name=name,
                email=email,
                role=Role.JUDGE,
                judicial_id=judicial_id,
                is_approved=True,
                experience=experience,
                specialization=specialization,
            )
        )

    for n in range(1, plan.lawyers + 1):
        if n <= len(_FIXED_LAWYERS):
            name, bar_id, email, experience, specialization = _FIXED_LAWYERS[n - 1]
        else:
            name = random_name(rng)
            bar_id = _sequence_id("BAR", n)
            email = f"{_email_local_part(name)}@lawfirm.com"
            experience = f"{rng.randint(2, 16)} years"
            specialization = rng.choice(SPECIALIZATIONS)
        users.append(
            User(
                address=next_address(),
                name=name,
                email=email,
                role=Role.LAWYER,
                bar_id=bar_id,
                is_approved=True,
                experience=experience,
                specialization=specialization,
            )
        )

    for n in range(1, plan.clients + 1):
        if n <= len(_FIXED_CLIENTS):
            name, email, company = _FIXED_CLIENTS[n - 1]
        else:
            name = random_name(rng)
            email = f"client{n}@example.com"
            company = f"Company {n}"
        users.append(
            User(
                address=next_address(),
                name=name,
                email=email,
                role=Role.CLIENT,
                is_approved=True,
                company=company,
            )
        )

    return users


# ---------------------------------------------------------------------------
# Cases
# ---------------------------------------------------------------------------


def _names(users: list[User], role: Role, fallback: str) -> list[str]:
    names = [u.name for u in users if u.role is role]
    return names or [fallback]


def _document(name: str, by: str, on: date, plan: SeedPlan, rng: random.Random) -> Document:
    cid = fake_cid(rng)
    return Document(
        name=name,
        content_identifier=cid,
        url=f"{plan.gateway_url.rstrip('/')}/{cid}",
        uploaded_by=by,
        upload_date=on,
        document_type=name.rsplit(".", 1)[-1].lower(),
    )


def _fixed_case(case_id: int, spec: _FixedCase, plan: SeedPlan, rng: random.Random) -> Case:
    return Case(
        id=case_id,
        title=spec.title,
        description=spec.description,
        case_type=spec.case_type,
        submitted_by=spec.client,
        assigned_to=spec.lawyer,
        judge=spec.judge,
        status=spec.status,
        filing_date=spec.filing_date,
        next_hearing=spec.next_hearing,
        court_room=spec.court_room,
        documents=tuple(_document(n, by, on, plan, rng) for n, by, on in spec.documents),
        history=tuple(Event(occurred_on=on, action=a, by=by) for on, a, by in spec.history),
    )


def _generated_case(
    case_id: int,
    *,
    clients: list[str],
    lawyers: list[str],
    judges: list[str],
    plan: SeedPlan,
    rng: random.Random,
) -> Case:
    client = rng.choice(clients)
    lawyer = rng.choice(lawyers)
    judge = rng.choice(judges)
    status = rng.choice(list(CaseStatus))
    case_type = rng.choice(CASE_TYPES)

    filed = random_date(rng, plan.start, plan.end)
    assigned = random_date(rng, filed, plan.end)
    status_changed = random_date(rng, assigned, plan.end)
    next_hearing = None
    if status is not CaseStatus.CLOSED:
        next_hearing = random_date(rng, status_changed, plan.end + timedelta(days=90))

    defendant = f"Defendant {case_id}"
    return Case(
        id=case_id,
        title=f"Case {case_id}: {client} vs. {defendant}",
        description=f"This is a sample case description for case {case_id}.",
        case_type=case_type,
        submitted_by=client,
        assigned_to=lawyer,
        judge=judge,
        status=status,
        filing_date=filed,
        next_hearing=next_hearing,
        court_room=f"Room {rng.randint(1, 5)}01, District Court",
        documents=(
            _document(f"Document1_Case{case_id}.pdf", client, filed, plan, rng),
            _document(
                f"Document2_Case{case_id}.pdf",
                lawyer,
                random_date(rng, filed, plan.end),
                plan,
                rng,
            ),
        ),
        history=(
            Event(occurred_on=filed, action="Case Filed", by=client),
            Event(occurred_on=assigned, action="Case Assigned to Judge", by="System"),
            Event(occurred_on=status_changed, action=f"Status Changed to {status}", by=judge),
        ),
    )


def generate_cases(users: list[User], plan: SeedPlan, rng: random.Random) -> list[Case]:
    """Build ``plan.cases`` cases with ids 1..N.

    The first ids are the fixed showcase cases; generated cases draw their
    parties from the roster so dashboards can filter by name.
    """
    clients = _names(users, Role.CLIENT, "Client 1")
    lawyers = _names(users, Role.LAWYER, "Lawyer 1")
    judges = _names(users, Role.JUDGE, "Judge 1")

    cases: list[Case] = []
    for case_id in range(1, plan.cases + 1):
        if case_id <= len(_FIXED_CASES):
            cases.append(_fixed_case(case_id, _FIXED_CASES[case_id - 1], plan, rng))
        else:
            cases.append(
                _generated_case(
                    case_id,
                    clients=clients,
                    lawyers=lawyers,
                    judges=judges,
                    plan=plan,
                    rng=rng,
                )
            )
    return cases

