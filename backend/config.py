from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

# Get the directory where this config file is located.
_BACKEND_DIR = Path(__file__).parent.resolve()
_PROJECT_ROOT = _BACKEND_DIR.parent.resolve()

# Address prefix (human-readable part) per network variant
KASPA_ADDRESS_PREFIXES = {
    "mainnet": "kaspa",
    "testnet": "kaspatest",
    "devnet": "kaspadev",
    "simnet": "kaspasim",
}
KASPA_NETWORKS = tuple(KASPA_ADDRESS_PREFIXES)


class Settings(BaseSettings):
    # Kaspa REST API base URLs (one per network variant)
    KASPA_API_URL: str = "https://api.kaspa.org"
    KASPA_TESTNET_API_URL: str = "https://api-tn10.kaspa.org"
    KASPA_DEVNET_API_URL: Optional[str] = None
    KASPA_SIMNET_API_URL: Optional[str] = None

    # Token identity used to build consumer message refs ("KAS-mainnet")
    KASPA_TOKEN_SYMBOL: str = "KAS"

    # Wallet Sync Scheduler
    KASPA_WALLET_TIMER_INTERVAL_SECONDS: float = 10.0
    KASPA_WALLET_TRANSACTIONS_LIMIT: int = 50
    KASPA_WALLET_MAX_RETRIES: int = 10
    # "light" and "full" resolve input addresses; "no" leaves inputs bare.
    KASPA_RESOLVE_PREVIOUS_OUTPOINTS: str = "no"

    # Wallet worker (single-address process)
    KASPA_WALLET_ADDRESS: Optional[str] = None
    KASPA_NETWORK: str = "mainnet"

    # API Settings
    API_TIMEOUT_SECONDS: int = 30
    MAX_RETRY_ATTEMPTS: int = 4
    RETRY_BASE_DELAY: float = 1.0
    RETRY_MAX_DELAY: float = 30.0

    # Production Settings
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    LOG_FILE: Optional[str] = None

    @field_validator(
        "KASPA_API_URL",
        "KASPA_TESTNET_API_URL",
        "KASPA_DEVNET_API_URL",
        "KASPA_SIMNET_API_URL",
        mode="before",
    )
    @classmethod
    def _normalize_api_url(cls, value: object) -> object:
        if value is None:
            return value
        text = str(value).strip().strip('"').strip("'")
        if not text:
            return None
        # Keep scheme://host normalization simple and deterministic.
        return text.rstrip("/")

    @field_validator("KASPA_NETWORK", mode="before")
    @classmethod
    def _normalize_network(cls, value: object) -> object:
        text = str(value or "").strip().lower()
        if text not in KASPA_NETWORKS:
            raise ValueError(
                f"Unsupported Kaspa network {value!r}; expected one of {', '.join(KASPA_NETWORKS)}"
            )
        return text

    @field_validator("KASPA_RESOLVE_PREVIOUS_OUTPOINTS", mode="before")
    @classmethod
    def _normalize_resolve_mode(cls, value: object) -> object:
        text = str(value or "no").strip().lower()
        if text not in ("no", "light", "full"):
            raise ValueError("KASPA_RESOLVE_PREVIOUS_OUTPOINTS must be no, light or full")
        return text

    @field_validator("KASPA_WALLET_ADDRESS", mode="before")
    @classmethod
    def _normalize_wallet_address(cls, value: object) -> object:
        if value is None:
            return value
        text = str(value).strip()
        return text.lower() or None

    def api_url_for_network(self, network: str) -> Optional[str]:
        """Return the REST base URL configured for a network variant."""
        return {
            "mainnet": self.KASPA_API_URL,
            "testnet": self.KASPA_TESTNET_API_URL,
            "devnet": self.KASPA_DEVNET_API_URL,
            "simnet": self.KASPA_SIMNET_API_URL,
        }.get(network)

    class Config:
        # Load project-root .env first (common workflow), then backend/.env
        # as an override if present.
        env_file = (
            str(_PROJECT_ROOT / ".env"),
            str(_BACKEND_DIR / ".env"),
        )
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
