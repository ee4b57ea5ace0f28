import sys
from pathlib import Path

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from conftest import (  # noqa: E402
    ADDRESS_A,
    ADDRESS_B,
    ADDRESS_C,
    SCRIPT_A,
    SCRIPT_B,
    make_output,
    make_raw_transaction,
)
from models.kaspa import KaspaTransaction  # noqa: E402
from models.wallet import TransactionStatus, TransactionType  # noqa: E402
from services.kaspa.address import AddressFormat  # noqa: E402
from services.kaspa.transaction_mapper import (  # noqa: E402
    map_transaction_to_ui,
    resolve_output_address,
)


def _tx(outputs, **overrides) -> KaspaTransaction:
    return KaspaTransaction.model_validate(make_raw_transaction("tx_1", outputs, **overrides))


def test_single_output_to_self_is_receive(raw_receive_transaction):
    record = map_transaction_to_ui(
        KaspaTransaction.model_validate(raw_receive_transaction), ADDRESS_A
    )

    assert record.type == TransactionType.RECEIVE
    assert record.value == 100
    assert record.from_address is None
    assert record.to == [ADDRESS_A]


def test_change_output_without_resolved_inputs_reads_as_receive(raw_send_transaction):
    record = map_transaction_to_ui(
        KaspaTransaction.model_validate(raw_send_transaction), ADDRESS_B
    )

    # Inputs are not resolved, so B only sees itself among the outputs.
    assert record.type == TransactionType.RECEIVE
    assert record.value == 70
    assert record.from_address is None
    assert record.to == [ADDRESS_A, ADDRESS_B]


def test_send_with_resolved_inputs_excludes_change(raw_send_transaction):
    raw_send_transaction["inputs"] = [
        {"index": 0, "previous_outpoint_address": ADDRESS_B, "previous_outpoint_amount": 100}
    ]

    record = map_transaction_to_ui(
        KaspaTransaction.model_validate(raw_send_transaction), ADDRESS_B
    )

    assert record.type == TransactionType.SEND
    assert record.value == 30
    assert record.from_address == ADDRESS_B
    assert record.to == [ADDRESS_A]


def test_resolved_inputs_from_someone_else_keep_receive(raw_send_transaction):
    raw_send_transaction["inputs"] = [{"previousOutpointAddress": ADDRESS_C}]

    record = map_transaction_to_ui(
        KaspaTransaction.model_validate(raw_send_transaction), ADDRESS_A
    )

    assert record.type == TransactionType.RECEIVE
    assert record.value == 30


def test_send_sums_only_outputs_to_other_addresses():
    tx = _tx([make_output(ADDRESS_A, 30, index=0), make_output(ADDRESS_C, 70, index=1)])

    record = map_transaction_to_ui(tx, ADDRESS_B)

    assert record.type == TransactionType.SEND
    assert record.value == 100
    assert record.from_address == ADDRESS_B
    assert record.to == [ADDRESS_A, ADDRESS_C]


def test_zero_outputs_is_degenerate_receive():
    record = map_transaction_to_ui(_tx([]), ADDRESS_A)

    assert record.type == TransactionType.RECEIVE
    assert record.value == 0
    assert record.from_address is None
    assert record.to is None


def test_null_outputs_behave_like_zero_outputs():
    record = map_transaction_to_ui(_tx(None), ADDRESS_A)
    assert record.type == TransactionType.RECEIVE
    assert record.value == 0


def test_undecodable_output_is_excluded_but_transaction_retained():
    tx = _tx(
        [
            make_output(ADDRESS_A, 100, index=0),
            make_output(None, 500, index=1, script_public_key="6a0401020304"),
            make_output(None, 900, index=2),
        ]
    )

    record = map_transaction_to_ui(tx, ADDRESS_A)

    assert record.id == "tx_1"
    assert record.type == TransactionType.RECEIVE
    assert record.value == 100
    assert record.to == [ADDRESS_A]


def test_send_with_only_undecodable_outputs_has_zero_value():
    tx = _tx([make_output(None, 500, script_public_key="deadbeef")])

    record = map_transaction_to_ui(tx, ADDRESS_A)

    assert record.type == TransactionType.SEND
    assert record.value == 0
    assert record.from_address == ADDRESS_A
    assert record.to is None


def test_output_address_resolution_priority():
    fmt = AddressFormat.for_network("mainnet")
    raw = make_output(
        ADDRESS_A,
        1,
        script_public_key=SCRIPT_B,
        verbose_data={"scriptPublicKeyAddress": ADDRESS_C},
    )
    tx = _tx([raw])
    assert resolve_output_address(tx.outputs[0], fmt) == ADDRESS_A

    raw["script_public_key_address"] = None
    tx = _tx([raw])
    assert resolve_output_address(tx.outputs[0], fmt) == ADDRESS_C

    raw["verbose_data"] = None
    tx = _tx([raw])
    assert resolve_output_address(tx.outputs[0], fmt) == ADDRESS_B


def test_camel_case_rpc_outputs_decode_from_nested_script():
    tx = KaspaTransaction.model_validate(
        {
            "transactionId": "tx_rpc",
            "isAccepted": False,
            "outputs": [
                {"value": "250", "scriptPublicKey": {"version": 0, "scriptPublicKey": SCRIPT_A}},
            ],
        }
    )

    record = map_transaction_to_ui(tx, ADDRESS_A)

    assert record.id == "tx_rpc"
    assert record.type == TransactionType.RECEIVE
    assert record.value == 250
    assert record.status == TransactionStatus.PENDING


def test_status_ordering_key_and_timestamp_pass_through(raw_receive_transaction):
    record = map_transaction_to_ui(
        KaspaTransaction.model_validate(raw_receive_transaction), ADDRESS_A
    )
    assert record.status == TransactionStatus.CONFIRMED
    assert record.blue_score == 81234567
    assert record.timestamp == 1717171717000


def test_missing_block_time_and_blue_score_stay_unset():
    tx = _tx([make_output(ADDRESS_A, 5)], block_time=None, accepting_block_blue_score=None)
    record = map_transaction_to_ui(tx, ADDRESS_A)
    assert record.timestamp is None
    assert record.blue_score is None


def test_account_address_comparison_is_case_insensitive():
    tx = _tx([make_output(ADDRESS_A.upper(), 42)])
    record = map_transaction_to_ui(tx, ADDRESS_A.upper())
    assert record.type == TransactionType.RECEIVE
    assert record.value == 42


def test_explicit_address_format_is_used_for_script_decoding():
    tx = _tx([make_output(None, 10, script_public_key="20" + "cc" * 32 + "ac")])
    testnet_address = "kaspatest:qrxvenxvenxvenxvenxvenxvenxvenxvenxvenxvenxvenxvenxvc3rysjr0d"

    record = map_transaction_to_ui(tx, testnet_address, AddressFormat.for_network("testnet"))

    assert record.type == TransactionType.RECEIVE
    assert record.value == 10


def test_large_amounts_are_summed_without_precision_loss():
    big = 2**62 + 1
    tx = _tx([make_output(ADDRESS_A, big, index=0), make_output(ADDRESS_A, big, index=1)])
    record = map_transaction_to_ui(tx, ADDRESS_A)
    assert record.value == 2 * big
