from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from config import KASPA_ADDRESS_PREFIXES, KASPA_NETWORKS
from models.types import Uint64

T = TypeVar("T")


class CertifiedValue(BaseModel, Generic[T]):
    """A value tagged with whether it was verified against a consensus source."""

    model_config = ConfigDict(frozen=True)

    data: T
    certified: bool = False


class TransactionType(str, Enum):
    SEND = "send"
    RECEIVE = "receive"


class TransactionStatus(str, Enum):
    CONFIRMED = "confirmed"
    PENDING = "pending"


class TransactionRecord(BaseModel):
    """Directional, user-facing view of a ledger transaction for one address.

    ``from_address`` is None for receives, where the sender is not known.
    ``to`` is None rather than an empty list when no recipient address could
    be resolved.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    type: TransactionType
    status: TransactionStatus
    value: Uint64 = 0
    from_address: Optional[str] = Field(default=None, alias="from")
    to: Optional[list[str]] = None
    timestamp: Optional[Uint64] = None
    blue_score: Optional[Uint64] = Field(default=None, alias="blueScore")


CertifiedTransaction = CertifiedValue[TransactionRecord]
CertifiedBalance = CertifiedValue[Optional[Uint64]]


@dataclass
class WalletSnapshot:
    """In-memory wallet state owned by a single scheduler.

    ``transactions`` only ever grows: entries are keyed by transaction id and
    never replaced once inserted.
    """

    balance: Optional[CertifiedBalance] = None
    transactions: dict[str, CertifiedTransaction] = field(default_factory=dict)


class WalletSyncParams(BaseModel):
    """Parameters for one wallet sync job.

    The address prefix must belong to ``network``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    identity: Any = None  # Opaque auth context, passed through untouched
    network: str = "mainnet"
    address: str

    @field_validator("network", mode="before")
    @classmethod
    def _normalize_network(cls, value: object) -> object:
        text = str(value or "").strip().lower()
        if text not in KASPA_NETWORKS:
            raise ValueError(f"Unsupported Kaspa network: {value!r}")
        return text

    @field_validator("address", mode="before")
    @classmethod
    def _normalize_address(cls, value: object) -> object:
        text = str(value or "").strip().lower()
        if not text:
            raise ValueError("Wallet address is required")
        return text

    @model_validator(mode="after")
    def _check_address_network(self) -> "WalletSyncParams":
        prefix, sep, _ = self.address.partition(":")
        expected = KASPA_ADDRESS_PREFIXES[self.network]
        if not sep or prefix != expected:
            raise ValueError(
                f"Address {self.address!r} does not belong to {self.network} "
                f"(expected prefix {expected!r})"
            )
        return self
