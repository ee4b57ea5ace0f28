"""
Kaspa wallet sync scheduler.

Each cycle fetches the balance and the latest transactions of one address,
classifies the transactions, merges the unseen ones into an in-memory
snapshot and posts a single message to the consumer when anything changed.

The snapshot belongs to the scheduler alone. It is only mutated inside the
sync job, and the outside world only learns about it through messages.
"""

import asyncio
from typing import Optional

from config import settings
from models.kaspa import KaspaTransaction
from models.wallet import (
    CertifiedBalance,
    CertifiedTransaction,
    WalletSnapshot,
    WalletSyncParams,
)
from services.kaspa.address import AddressFormat
from services.kaspa.api_client import KaspaApiClient, kaspa_api_client
from services.kaspa.errors import InvariantViolation, ParameterError, TransientFetchError
from services.kaspa.transaction_mapper import map_transaction_to_ui
from services.scheduler import JobData, MessageChannel, SchedulerTimer
from utils.logger import kaspa_logger as logger
from utils.retry import RetryConfig, retry_with_delay

SYNC_OK = "sync-ok"
SYNC_ERROR = "sync-error"


def _exception_text(exc: BaseException) -> str:
    """Return a non-empty exception string for messages and logs."""
    text = str(exc).strip()
    return text if text else repr(exc)


class KaspaWalletScheduler:
    """Polls the Kaspa REST API for one wallet and notifies on change."""

    def __init__(
        self,
        api_client: Optional[KaspaApiClient] = None,
        channel: Optional[MessageChannel] = None,
        interval_seconds: Optional[float] = None,
        max_retries: Optional[int] = None,
        transactions_limit: Optional[int] = None,
        retry_config: Optional[RetryConfig] = None,
    ):
        self._api = api_client or kaspa_api_client
        self._interval = interval_seconds or settings.KASPA_WALLET_TIMER_INTERVAL_SECONDS
        self._max_retries = settings.KASPA_WALLET_MAX_RETRIES if max_retries is None else max_retries
        self._transactions_limit = transactions_limit or settings.KASPA_WALLET_TRANSACTIONS_LIMIT
        self._retry_config = retry_config or RetryConfig(
            base_delay=settings.RETRY_BASE_DELAY,
            max_delay=settings.RETRY_MAX_DELAY,
        )
        self._ref: Optional[str] = None
        self._snapshot = WalletSnapshot()
        self._wallet: Optional[tuple[str, str]] = None
        self.timer = SchedulerTimer("syncKaspaWalletStatus", channel=channel)

    # ==================== LIFECYCLE ====================

    def _set_ref(self, params: Optional[WalletSyncParams]):
        self._ref = f"{settings.KASPA_TOKEN_SYMBOL}-{params.network}" if params is not None else None

    async def start(self, params: Optional[WalletSyncParams]):
        """Start syncing ``params``. A no-op while already running; stop first to switch wallets."""
        if self.timer.running:
            logger.warning("Kaspa wallet scheduler already running", ref=self._ref)
            return

        if params is not None and self._wallet_key(params) != self._wallet:
            # A different wallet starts from an empty snapshot.
            self._snapshot = WalletSnapshot()
            self._wallet = self._wallet_key(params)
        self._set_ref(params)
        await self.timer.start(
            interval_seconds=self._interval,
            job=self._sync_wallet,
            data=self._job_data(params),
        )

    async def trigger(self, params: Optional[WalletSyncParams]):
        await self.timer.trigger(job=self._sync_wallet, data=self._job_data(params))

    def stop(self):
        self.timer.stop()

    async def shutdown(self):
        await self.timer.shutdown()

    @staticmethod
    def _wallet_key(params: WalletSyncParams) -> tuple[str, str]:
        return params.network, params.address

    @staticmethod
    def _job_data(params: Optional[WalletSyncParams]) -> JobData[WalletSyncParams]:
        return JobData(identity=params.identity if params is not None else None, data=params)

    # ==================== SYNC CYCLE ====================

    async def _sync_wallet(self, job: JobData[WalletSyncParams]):
        params = job.data
        if params is None:
            error = ParameterError("No data provided to get Kaspa balance.")
            self._post_message_wallet_error(error)
            raise error

        address_format = AddressFormat.for_network(params.network)
        log = logger.bind(network=params.network, address=params.address)

        async def load_and_sync():
            await self._load_and_sync_wallet_data(params, address_format)

        load_and_sync.__name__ = "load_and_sync_kaspa_wallet"

        try:
            await retry_with_delay(
                load_and_sync,
                max_retries=self._max_retries,
                config=self._retry_config,
                non_retryable=(InvariantViolation, ParameterError),
            )
        except InvariantViolation as e:
            log.critical(
                "Kaspa wallet snapshot invariant violated",
                error=_exception_text(e),
            )
            self._post_message_wallet_error(e)
            raise
        except Exception as e:
            log.error(
                "Kaspa wallet sync failed",
                error_type=type(e).__name__,
                error=_exception_text(e),
            )
            self._post_message_wallet_error(e)

    async def _load_balance(self, params: WalletSyncParams) -> CertifiedBalance:
        try:
            balance = await self._api.get_balance(params.address, params.network)
        except ParameterError:
            raise
        except Exception as e:
            raise TransientFetchError(f"Failed to load Kaspa balance: {_exception_text(e)}") from e
        # The REST API is not a consensus source.
        return CertifiedBalance(data=balance, certified=False)

    async def _load_transactions(
        self, params: WalletSyncParams, address_format: AddressFormat
    ) -> list[CertifiedTransaction]:
        try:
            transactions: list[KaspaTransaction] = await self._api.get_transactions(
                params.network, params.address, self._transactions_limit
            )
        except ParameterError:
            raise
        except Exception as e:
            raise TransientFetchError(f"Failed to load Kaspa transactions: {_exception_text(e)}") from e

        records = [
            CertifiedTransaction(
                data=map_transaction_to_ui(tx, params.address, address_format),
                certified=False,
            )
            for tx in transactions
        ]
        return [record for record in records if record.data.id not in self._snapshot.transactions]

    async def _load_and_sync_wallet_data(
        self, params: WalletSyncParams, address_format: AddressFormat
    ):
        tasks = [
            asyncio.create_task(self._load_balance(params)),
            asyncio.create_task(self._load_transactions(params, address_format)),
        ]
        try:
            balance, transactions = await asyncio.gather(*tasks)
        except BaseException:
            # Cancel the sibling fetch before the next attempt.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        self._sync_wallet_data(balance, transactions)

    def _sync_wallet_data(
        self, balance: CertifiedBalance, transactions: list[CertifiedTransaction]
    ) -> bool:
        """Merge a fetch result into the snapshot and notify if it changed.

        Contains no await, so the merge and its message are never separated
        by another task and a consumer never sees half of an update. Returns
        whether the snapshot changed.
        """
        stored = self._snapshot.balance

        if stored is not None and stored.certified and not balance.certified:
            raise InvariantViolation(
                "Balance certification status cannot change from certified to uncertified"
            )

        balance_changed = (
            stored is None
            or stored.data != balance.data
            or (balance.certified and not stored.certified)
        )

        # The fetch may overlap with entries merged since it was filtered,
        # and the API can list a transaction twice.
        new_transactions: list[CertifiedTransaction] = []
        seen: set[str] = set()
        for transaction in transactions:
            tx_id = transaction.data.id
            if tx_id in self._snapshot.transactions or tx_id in seen:
                continue
            seen.add(tx_id)
            new_transactions.append(transaction)

        if not balance_changed and not new_transactions:
            return False

        if balance_changed:
            self._snapshot.balance = balance
        for transaction in new_transactions:
            self._snapshot.transactions[transaction.data.id] = transaction

        logger.info(
            "Kaspa wallet updated",
            ref=self._ref,
            balance_changed=balance_changed,
            new_transactions=len(new_transactions),
            known_transactions=len(self._snapshot.transactions),
        )

        self._post_message_wallet(balance, new_transactions)
        return True

    # ==================== MESSAGING ====================

    def _post_message_wallet(
        self, balance: CertifiedBalance, new_transactions: list[CertifiedTransaction]
    ):
        if self._ref is None:
            return

        self.timer.post_msg(
            ref=self._ref,
            msg=SYNC_OK,
            data={
                "balance": balance.model_dump(mode="json"),
                "newTransactions": [
                    transaction.model_dump(mode="json", by_alias=True)
                    for transaction in new_transactions
                ],
            },
        )

    def _post_message_wallet_error(self, error: BaseException):
        if self._ref is None:
            return

        self.timer.post_msg(
            ref=self._ref,
            msg=SYNC_ERROR,
            data={
                "error": _exception_text(error),
                "errorType": type(error).__name__,
            },
        )
