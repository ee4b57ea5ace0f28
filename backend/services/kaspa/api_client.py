import httpx
from typing import Optional

from config import settings
from models.kaspa import KaspaTransaction
from services.kaspa.errors import ParameterError
from utils.logger import api_logger as logger
from utils.retry import RetryConfig, RetryableClient


class KaspaApiClient:
    """Client for the Kaspa REST API (api.kaspa.org and its testnet mirrors)"""

    def __init__(self, retry_config: Optional[RetryConfig] = None):
        self._client: Optional[httpx.AsyncClient] = None
        self._retry_config = retry_config or RetryConfig(
            max_attempts=settings.MAX_RETRY_ATTEMPTS,
            base_delay=settings.RETRY_BASE_DELAY,
            max_delay=settings.RETRY_MAX_DELAY,
        )

    async def _get_client(self) -> RetryableClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=float(settings.API_TIMEOUT_SECONDS))
        return RetryableClient(self._client, self._retry_config)

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    @staticmethod
    def _base_url(network: str) -> str:
        base_url = settings.api_url_for_network(network)
        if not base_url:
            raise ParameterError(f"No Kaspa API URL configured for network {network!r}")
        return base_url

    async def get_balance(self, address: str, network: str) -> Optional[int]:
        """Fetch the (uncertified) balance of an address in sompi."""
        client = await self._get_client()
        response = await client.get(f"{self._base_url(network)}/addresses/{address}/balance")
        data = response.json()

        balance = data.get("balance") if isinstance(data, dict) else None
        if balance is None:
            return None
        return int(balance)

    async def get_transactions(
        self, network: str, address: str, limit: int = 50
    ) -> list[KaspaTransaction]:
        """Fetch the most recent transactions of an address, newest first."""
        client = await self._get_client()
        params = {
            "limit": limit,
            "offset": 0,
            "resolve_previous_outpoints": settings.KASPA_RESOLVE_PREVIOUS_OUTPOINTS,
        }
        response = await client.get(
            f"{self._base_url(network)}/addresses/{address}/full-transactions",
            params=params,
        )
        data = response.json()
        if not isinstance(data, list):
            logger.warning(
                "Unexpected transactions payload",
                network=network,
                payload_type=type(data).__name__,
            )
            return []

        return [KaspaTransaction.model_validate(tx) for tx in data]


# Singleton instance
kaspa_api_client = KaspaApiClient()
