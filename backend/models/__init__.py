from .types import BIGINT_TAG, UINT64_MAX, Uint64
from .wallet import (
    CertifiedBalance,
    CertifiedTransaction,
    CertifiedValue,
    TransactionRecord,
    TransactionStatus,
    TransactionType,
    WalletSnapshot,
    WalletSyncParams,
)
from .kaspa import (
    KaspaOutputVerboseData,
    KaspaScriptPublicKey,
    KaspaTransaction,
    KaspaTransactionInput,
    KaspaTransactionOutput,
)

__all__ = [
    "BIGINT_TAG",
    "UINT64_MAX",
    "Uint64",
    "CertifiedBalance",
    "CertifiedTransaction",
    "CertifiedValue",
    "TransactionRecord",
    "TransactionStatus",
    "TransactionType",
    "WalletSnapshot",
    "WalletSyncParams",
    "KaspaOutputVerboseData",
    "KaspaScriptPublicKey",
    "KaspaTransaction",
    "KaspaTransactionInput",
    "KaspaTransactionOutput",
]
