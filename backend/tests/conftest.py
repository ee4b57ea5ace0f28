"""Shared fixtures for Kaspa wallet sync tests."""

import sys
from pathlib import Path

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

import pytest
from unittest.mock import AsyncMock

from models.kaspa import KaspaTransaction


# ---------------------------------------------------------------------------
# Addresses (Schnorr pubkey payloads 0x11..11, 0x22..22 and 0xbb..bb)
# ---------------------------------------------------------------------------

ADDRESS_A = "kaspa:qqg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zng5quzmq"
ADDRESS_B = "kaspa:qq3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zywrsf7452"
ADDRESS_C = "kaspa:qzamhwamhwamhwamhwamhwamhwamhwamhwamhwamhwamhwamhwamkp97ucfh7"

SCRIPT_A = "20" + "11" * 32 + "ac"
SCRIPT_B = "20" + "22" * 32 + "ac"


@pytest.fixture
def address_a():
    return ADDRESS_A


@pytest.fixture
def address_b():
    return ADDRESS_B


# ---------------------------------------------------------------------------
# Raw API response fixtures (mimicking /addresses/{address}/full-transactions)
# ---------------------------------------------------------------------------


def make_raw_transaction(tx_id: str, outputs: list[dict], **overrides) -> dict:
    payload = {
        "subnetwork_id": "0000000000000000000000000000000000000000",
        "transaction_id": tx_id,
        "hash": tx_id,
        "mass": "2036",
        "block_hash": ["b" * 64],
        "block_time": 1717171717000,
        "is_accepted": True,
        "accepting_block_hash": "c" * 64,
        "accepting_block_blue_score": 81234567,
        "inputs": None,
        "outputs": outputs,
    }
    payload.update(overrides)
    return payload


def make_output(address, amount: int, index: int = 0, **overrides) -> dict:
    payload = {
        "transaction_id": "t",
        "index": index,
        "amount": amount,
        "script_public_key": None,
        "script_public_key_address": address,
        "script_public_key_type": "pubkey",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def raw_receive_transaction():
    """One output paying ADDRESS_A."""
    return make_raw_transaction("tx_receive", [make_output(ADDRESS_A, 100)])


@pytest.fixture
def raw_send_transaction():
    """ADDRESS_B pays 30 to ADDRESS_A and 70 back to itself as change."""
    return make_raw_transaction(
        "tx_send",
        [make_output(ADDRESS_A, 30, index=0), make_output(ADDRESS_B, 70, index=1)],
    )


@pytest.fixture
def mock_kaspa_api():
    """A fully-mocked KaspaApiClient returning an empty, zero-balance wallet."""
    client = AsyncMock()
    client.get_balance = AsyncMock(return_value=0)
    client.get_transactions = AsyncMock(return_value=[])
    return client


def to_transactions(raw: list[dict]) -> list[KaspaTransaction]:
    return [KaspaTransaction.model_validate(tx) for tx in raw]
