"""Raw Kaspa REST API payloads.

The public REST API answers in snake_case, while node RPC-style payloads
(and some indexers) use camelCase with nested ``verboseData`` and
``scriptPublicKey`` objects. Both shapes validate into the same models.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from models.types import Uint64


class KaspaScriptPublicKey(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    version: Optional[int] = None
    script_public_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("scriptPublicKey", "script_public_key", "script"),
    )


class KaspaOutputVerboseData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    script_public_key_address: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("scriptPublicKeyAddress", "script_public_key_address"),
    )
    script_public_key_type: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("scriptPublicKeyType", "script_public_key_type"),
    )


class KaspaTransactionOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    index: Optional[int] = None
    amount: Uint64 = Field(default=0, validation_alias=AliasChoices("amount", "value"))
    script_public_key: Optional[str] = None
    script_public_key_address: Optional[str] = None
    script_public_key_type: Optional[str] = None
    verbose_data: Optional[KaspaOutputVerboseData] = Field(
        default=None,
        validation_alias=AliasChoices("verboseData", "verbose_data"),
    )
    script_public_key_object: Optional[KaspaScriptPublicKey] = Field(
        default=None,
        validation_alias=AliasChoices("scriptPublicKey", "script_public_key_object"),
    )

    @field_validator("amount", mode="before")
    @classmethod
    def _default_amount(cls, value: object) -> object:
        return 0 if value is None else value


class KaspaTransactionInput(BaseModel):
    """An input; the previous outpoint fields are only present when the API
    was asked to resolve them (``resolve_previous_outpoints=light|full``)."""

    model_config = ConfigDict(populate_by_name=True)

    index: Optional[int] = None
    previous_outpoint_address: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("previous_outpoint_address", "previousOutpointAddress"),
    )
    previous_outpoint_amount: Optional[Uint64] = Field(
        default=None,
        validation_alias=AliasChoices("previous_outpoint_amount", "previousOutpointAmount"),
    )


class KaspaTransaction(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    transaction_id: str = Field(
        validation_alias=AliasChoices("transaction_id", "transactionId"),
    )
    is_accepted: bool = Field(
        default=False,
        validation_alias=AliasChoices("is_accepted", "isAccepted"),
    )
    block_time: Optional[Uint64] = Field(
        default=None,
        validation_alias=AliasChoices("block_time", "blockTime"),
    )
    accepting_block_blue_score: Optional[Uint64] = Field(
        default=None,
        validation_alias=AliasChoices("accepting_block_blue_score", "acceptingBlockBlueScore"),
    )
    inputs: list[KaspaTransactionInput] = []
    outputs: list[KaspaTransactionOutput] = []

    @field_validator("inputs", "outputs", mode="before")
    @classmethod
    def _default_lists(cls, value: object) -> object:
        return [] if value is None else value

    @field_validator("is_accepted", mode="before")
    @classmethod
    def _default_is_accepted(cls, value: object) -> object:
        return False if value is None else value

