"""Kaspa wallet worker: keeps one address in sync and logs every update.

Run from backend/ with:
    KASPA_WALLET_ADDRESS=kaspa:... python -m workers.kaspa_wallet_worker
"""

from __future__ import annotations

import asyncio
import os
import signal
import sys

_BACKEND = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND not in sys.path:
    sys.path.insert(0, _BACKEND)

from config import settings
from models.wallet import WalletSyncParams
from services.kaspa.address import is_valid_address
from services.kaspa.api_client import kaspa_api_client
from services.kaspa.wallet_scheduler import SYNC_ERROR, SYNC_OK, KaspaWalletScheduler
from services.scheduler import ChannelMessage, QueueMessageChannel
from utils.logger import get_logger, setup_logging
from utils.serialization import revive

logger = get_logger("kaspa_wallet_worker")


def _log_message(message: ChannelMessage) -> None:
    data = revive(message.data)
    if message.msg == SYNC_OK:
        balance = data.get("balance") or {}
        new_transactions = data.get("newTransactions") or []
        logger.info(
            "Wallet sync update",
            ref=message.ref,
            balance=balance.get("data"),
            certified=balance.get("certified"),
            new_transactions=len(new_transactions),
            transaction_ids=[tx["data"]["id"] for tx in new_transactions],
        )
    elif message.msg == SYNC_ERROR:
        logger.warning(
            "Wallet sync error",
            ref=message.ref,
            error=data.get("error"),
            error_type=data.get("errorType"),
        )


async def _consume(channel: QueueMessageChannel) -> None:
    """Log every message the scheduler posts."""
    while True:
        message = await channel.queue.get()
        try:
            _log_message(message)
        except Exception as e:
            logger.exception(
                "Failed to handle wallet sync message",
                ref=message.ref,
                msg=message.msg,
                error_type=type(e).__name__,
            )
        finally:
            channel.queue.task_done()


def _build_params() -> WalletSyncParams:
    address = settings.KASPA_WALLET_ADDRESS
    if not address:
        raise SystemExit("KASPA_WALLET_ADDRESS is not set")
    if not is_valid_address(address, network=settings.KASPA_NETWORK):
        raise SystemExit(f"{address} is not a valid {settings.KASPA_NETWORK} Kaspa address")
    return WalletSyncParams(network=settings.KASPA_NETWORK, address=address)


async def main() -> None:
    setup_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON, log_file=settings.LOG_FILE)
    params = _build_params()

    channel = QueueMessageChannel()
    scheduler = KaspaWalletScheduler(channel=channel)
    consumer = asyncio.create_task(_consume(channel), name="kaspa-wallet-consumer")

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Signal handlers are unavailable on some platforms (Windows).
            pass

    logger.info(
        "Kaspa wallet worker starting",
        network=params.network,
        address=params.address,
        interval_seconds=settings.KASPA_WALLET_TIMER_INTERVAL_SECONDS,
    )
    try:
        await scheduler.start(params)
        await stop_event.wait()
    except asyncio.CancelledError:
        logger.info("Kaspa wallet worker cancelled")
    finally:
        await scheduler.shutdown()
        await channel.queue.join()
        consumer.cancel()
        await kaspa_api_client.close()
        logger.info("Kaspa wallet worker stopped")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
