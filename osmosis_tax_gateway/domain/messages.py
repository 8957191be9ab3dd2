"""
Tagged-variant decoding of raw transaction messages.

Ledger messages are loosely structured JSON objects whose shape depends on
the "@type" identifier. Each known shape is a pydantic model with explicit
optional fields, accepting both the LCD snake_case keys and the
protobuf-JSON camelCase keys. Identifiers are version-qualified
("/osmosis.poolmanager.v1beta1.MsgSwapExactAmountIn"), so matching is by
substring, first match wins.
"""

import logging
from typing import Any, ClassVar, List, Mapping, Optional, Sequence, Type

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


def _int_to_str(v):
    return str(v) if isinstance(v, int) and not isinstance(v, bool) else v


class Coin(BaseModel):
    """Raw {denom, amount} pair in base units"""

    model_config = ConfigDict(extra="ignore")

    denom: str = "unknown"
    amount: str = Field(default="0", pattern=r"^\d+$")

    @field_validator("denom", mode="before")
    @classmethod
    def _null_denom(cls, v):
        return "unknown" if v is None else v

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_to_str(cls, v):
        return "0" if v is None else _int_to_str(v)


class SwapRoute(BaseModel):
    model_config = ConfigDict(extra="ignore")

    pool_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("pool_id", "poolId"))
    token_in_denom: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("token_in_denom", "tokenInDenom")
    )
    token_out_denom: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("token_out_denom", "tokenOutDenom")
    )

    @field_validator("pool_id", mode="before")
    @classmethod
    def _pool_id_to_str(cls, v):
        return _int_to_str(v)


class LedgerMessage(BaseModel):
    """Base variant. pattern is the identifier substring that selects it."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    pattern: ClassVar[str] = ""

    type_url: str = ""


class MsgSwapExactAmountIn(LedgerMessage):
    pattern: ClassVar[str] = "MsgSwapExactAmountIn"

    routes: List[SwapRoute] = Field(default_factory=list)
    token_in: Optional[Coin] = Field(default=None, validation_alias=AliasChoices("token_in", "tokenIn"))
    token_out_min_amount: Optional[str] = Field(
        default=None,
        pattern=r"^\d+$",
        validation_alias=AliasChoices("token_out_min_amount", "tokenOutMinAmount"),
    )

    @field_validator("token_out_min_amount", mode="before")
    @classmethod
    def _min_amount_to_str(cls, v):
        return _int_to_str(v)


class MsgSwapExactAmountOut(LedgerMessage):
    pattern: ClassVar[str] = "MsgSwapExactAmountOut"

    routes: List[SwapRoute] = Field(default_factory=list)
    token_in_max_amount: Optional[str] = Field(
        default=None,
        pattern=r"^\d+$",
        validation_alias=AliasChoices("token_in_max_amount", "tokenInMaxAmount"),
    )
    token_out: Optional[Coin] = Field(default=None, validation_alias=AliasChoices("token_out", "tokenOut"))

    @field_validator("token_in_max_amount", mode="before")
    @classmethod
    def _max_amount_to_str(cls, v):
        return _int_to_str(v)


class MsgSend(LedgerMessage):
    pattern: ClassVar[str] = "MsgSend"

    from_address: Optional[str] = Field(default=None, validation_alias=AliasChoices("from_address", "fromAddress"))
    to_address: Optional[str] = Field(default=None, validation_alias=AliasChoices("to_address", "toAddress"))
    amount: List[Coin] = Field(default_factory=list)


class MsgDelegate(LedgerMessage):
    pattern: ClassVar[str] = "MsgDelegate"

    validator_address: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("validator_address", "validatorAddress")
    )
    amount: Optional[Coin] = None


class MsgUndelegate(MsgDelegate):
    pattern: ClassVar[str] = "MsgUndelegate"


class MsgWithdrawDelegatorReward(LedgerMessage):
    pattern: ClassVar[str] = "MsgWithdrawDelegatorReward"

    validator_address: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("validator_address", "validatorAddress")
    )


class MsgJoinPool(LedgerMessage):
    pattern: ClassVar[str] = "JoinPool"

    pool_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("pool_id", "poolId"))
    tokens_in: List[Coin] = Field(
        default_factory=list,
        validation_alias=AliasChoices("tokens_in", "tokensIn", "token_in_maxs", "tokenInMaxs"),
    )


class MsgExitPool(LedgerMessage):
    pattern: ClassVar[str] = "ExitPool"

    pool_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("pool_id", "poolId"))
    tokens_out: List[Coin] = Field(
        default_factory=list,
        validation_alias=AliasChoices("tokens_out", "tokensOut", "token_out_mins", "tokenOutMins"),
    )


class MsgVote(LedgerMessage):
    pattern: ClassVar[str] = "MsgVote"

    proposal_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("proposal_id", "proposalId"))

    @field_validator("proposal_id", mode="before")
    @classmethod
    def _proposal_id_to_str(cls, v):
        return _int_to_str(v)


class UnrecognizedMessage(LedgerMessage):
    """Fallback for identifiers outside the known set"""

    pass


# Order matters: first substring match wins
MESSAGE_VARIANTS: Sequence[Type[LedgerMessage]] = (
    MsgSwapExactAmountIn,
    MsgSwapExactAmountOut,
    MsgSend,
    MsgDelegate,
    MsgUndelegate,
    MsgWithdrawDelegatorReward,
    MsgJoinPool,
    MsgExitPool,
    MsgVote,
)


def message_type_url(raw: Mapping[str, Any]) -> str:
    """Type identifier of a raw message, whichever key the source used"""
    return str(raw.get("@type") or raw.get("typeUrl") or raw.get("type_url") or "")


def variant_for(type_url: str) -> Type[LedgerMessage]:
    for variant in MESSAGE_VARIANTS:
        if variant.pattern in type_url:
            return variant
    return UnrecognizedMessage


def decode_message(raw: Any) -> LedgerMessage:
    """
    Decode one raw message into its variant.

    Never raises: a non-mapping decodes to UnrecognizedMessage, and a known
    message with malformed fields decodes to its variant with every optional
    field left empty.
    """
    if not isinstance(raw, Mapping):
        return UnrecognizedMessage()

    type_url = message_type_url(raw)
    variant = variant_for(type_url)

    # camelCase sources carry the payload under "value" next to "typeUrl"
    payload = raw.get("value") if isinstance(raw.get("value"), Mapping) else raw

    try:
        return variant.model_validate({**payload, "type_url": type_url})
    except ValidationError as e:
        logger.debug(
            "Malformed message fields, keeping type only",
            extra={"type_url": type_url, "error_count": e.error_count()},
        )
        return variant(type_url=type_url)
