"""
Map raw Kaspa ledger transactions to directional wallet records.

Kaspa is UTXO based and by default the REST API lists outputs but not
resolved inputs, so direction is inferred from outputs alone:

- Receive: at least one output pays the account. The value is the sum of
  those outputs; the sender is unknown.
- Send: outputs exist but none pays the account. The value is the sum paid
  to other addresses (change back to self is excluded) and the sender is
  the account itself. This is best effort: a third-party transaction that
  merely lists other recipients looks the same.
- No outputs: kept as a zero-value receive so the transaction is not lost.

When inputs do carry their previous outpoint address and one of them is
the account, the transaction is a send regardless of outputs, and outputs
back to the account are change.
"""

from typing import Optional

from models.kaspa import KaspaTransaction, KaspaTransactionOutput
from models.wallet import TransactionRecord, TransactionStatus, TransactionType
from services.kaspa.address import AddressFormat, script_public_key_to_address
from utils.logger import get_logger

logger = get_logger("kaspa_transaction_mapper")


def resolve_output_address(
    output: KaspaTransactionOutput, address_format: AddressFormat
) -> Optional[str]:
    """Resolve an output's destination address.

    Priority: the API's decoded field, then ``verboseData``, then decoding
    the raw locking script with ``address_format``.
    """
    if output.script_public_key_address:
        return output.script_public_key_address.lower()

    if output.verbose_data and output.verbose_data.script_public_key_address:
        return output.verbose_data.script_public_key_address.lower()

    script_hex = output.script_public_key or (
        output.script_public_key_object.script_public_key
        if output.script_public_key_object
        else None
    )
    if not script_hex:
        return None

    return script_public_key_to_address(script_hex, address_format)


def map_transaction_to_ui(
    tx: KaspaTransaction,
    address: str,
    address_format: Optional[AddressFormat] = None,
) -> TransactionRecord:
    """Classify ``tx`` from the point of view of ``address``."""
    address = address.lower()
    if address_format is None:
        address_format = AddressFormat.for_address(address)

    output_addresses = [resolve_output_address(output, address_format) for output in tx.outputs]

    unresolved = sum(1 for addr in output_addresses if addr is None)
    if unresolved:
        logger.debug(
            "Unresolvable outputs ignored",
            transaction_id=tx.transaction_id,
            unresolved=unresolved,
            outputs=len(tx.outputs),
        )

    spends_own_outputs = any(
        (inp.previous_outpoint_address or "").lower() == address for inp in tx.inputs
    )
    is_receiving = not spends_own_outputs and any(addr == address for addr in output_addresses)
    is_sending = spends_own_outputs or (not is_receiving and len(tx.outputs) > 0)

    value = 0
    from_address: Optional[str] = None
    to_addresses: list[str] = []

    if is_receiving:
        tx_type = TransactionType.RECEIVE
        value = sum(
            output.amount
            for output, addr in zip(tx.outputs, output_addresses)
            if addr == address
        )
        to_addresses = [addr for addr in output_addresses if addr is not None]
    elif is_sending:
        tx_type = TransactionType.SEND
        value = sum(
            output.amount
            for output, addr in zip(tx.outputs, output_addresses)
            if addr is not None and addr != address
        )
        from_address = address
        to_addresses = [addr for addr in output_addresses if addr is not None and addr != address]
    else:
        tx_type = TransactionType.RECEIVE

    return TransactionRecord(
        id=tx.transaction_id,
        type=tx_type,
        status=TransactionStatus.CONFIRMED if tx.is_accepted else TransactionStatus.PENDING,
        value=value,
        from_address=from_address,
        to=to_addresses or None,
        # block_time is passed through in the API's own unit (milliseconds)
        timestamp=tx.block_time,
        blue_score=tx.accepting_block_blue_score,
    )
