"""Contract ABI fragments and the known-network table.

Only the functions and events the backend calls are listed; the deployed
contracts may expose more.
"""

from __future__ import annotations

from typing import Any

from evault.models.domain import NetworkInfo


def _fn(
    name: str,
    inputs: list[tuple[str, str]],
    outputs: list[tuple[str, str]] | None = None,
    *,
    view: bool = False,
) -> dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "stateMutability": "view" if view else "nonpayable",
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": n, "type": t} for n, t in (outputs or [])],
    }


USER_REGISTRY_ABI: list[dict[str, Any]] = [
    _fn("registerAsClient", [("name", "string"), ("email", "string")]),
    _fn("registerAsLawyer", [("name", "string"), ("email", "string"), ("barId", "string")]),
    _fn("registerAsJudge", [("name", "string"), ("email", "string"), ("judicialId", "string")]),
    _fn("isUserRegistered", [("user", "address")], [("", "bool")], view=True),
    _fn("isUserApproved", [("user", "address")], [("", "bool")], view=True),
    _fn("getUserRole", [("user", "address")], [("", "string")], view=True),
]

CASE_MANAGER_ABI: list[dict[str, Any]] = [
    _fn(
        "createCase",
        [
            ("title", "string"),
            ("description", "string"),
            ("caseType", "string"),
            ("client", "address"),
            ("lawyer", "address"),
            ("judge", "address"),
        ],
        [("caseId", "uint256")],
    ),
    _fn(
        "getCaseDetails",
        [("caseId", "uint256")],
        [
            ("id", "uint256"),
            ("title", "string"),
            ("description", "string"),
            ("caseType", "string"),
            ("client", "address"),
            ("lawyer", "address"),
            ("judge", "address"),
            ("status", "string"),
            ("filingDate", "uint256"),
        ],
        view=True,
    ),
    _fn("getClientCases", [("client", "address")], [("", "uint256[]")], view=True),
    _fn("getLawyerCases", [("lawyer", "address")], [("", "uint256[]")], view=True),
    _fn("getJudgeCases", [("judge", "address")], [("", "uint256[]")], view=True),
    _fn(
        "addDocument",
        [
            ("caseId", "uint256"),
            ("name", "string"),
            ("contentCID", "string"),
            ("documentType", "string"),
            ("isPublic", "bool"),
        ],
    ),
    {
        "type": "event",
        "name": "CaseCreated",
        "anonymous": False,
        "inputs": [
            {"name": "caseId", "type": "uint256", "indexed": True},
            {"name": "client", "type": "address", "indexed": True},
            {"name": "title", "type": "string", "indexed": False},
        ],
    },
]


# ---------------------------------------------------------------------------
# Networks
# ---------------------------------------------------------------------------

_DEFAULT_EXPLORER = "https://etherscan.io"

NETWORKS: dict[int, tuple[str, str]] = {
    1337: ("Ganache", _DEFAULT_EXPLORER),
    31337: ("Localhost", _DEFAULT_EXPLORER),
    11155111: ("Sepolia", "https://sepolia.etherscan.io"),
}


def network_for(chain_id: int) -> NetworkInfo:
    name, explorer = NETWORKS.get(chain_id, ("Unknown Network", _DEFAULT_EXPLORER))
    return NetworkInfo(chain_id=chain_id, name=name, explorer=explorer)


def transaction_url(chain_id: int, tx_hash: str) -> str:
    return f"{network_for(chain_id).explorer}/tx/{tx_hash}"


def address_url(chain_id: int, address: str) -> str:
    return f"{network_for(chain_id).explorer}/address/{address}"
