"""Transaction classifier - economic type and moved amounts of a transaction"""

from typing import Any, Callable, Dict, List, Optional, Sequence, Type

from osmosis_tax_gateway.domain.amounts import coin_or_none, parse_amount
from osmosis_tax_gateway.domain.messages import (
    LedgerMessage,
    MsgDelegate,
    MsgExitPool,
    MsgJoinPool,
    MsgSend,
    MsgSwapExactAmountIn,
    MsgSwapExactAmountOut,
    MsgUndelegate,
    MsgVote,
    MsgWithdrawDelegatorReward,
    decode_message,
)
from osmosis_tax_gateway.domain.models import Amount, ParsedMessages, TransactionType


def _swap_in(msg: MsgSwapExactAmountIn) -> List[Amount]:
    amounts = []
    if msg.token_in:
        amounts.append(parse_amount(msg.token_in))
    if msg.routes:
        out_min = coin_or_none(msg.routes[-1].token_out_denom, msg.token_out_min_amount)
        if out_min:
            amounts.append(out_min)
    return amounts


def _swap_out(msg: MsgSwapExactAmountOut) -> List[Amount]:
    amounts = []
    if msg.routes:
        in_max = coin_or_none(msg.routes[0].token_in_denom, msg.token_in_max_amount)
        if in_max:
            amounts.append(in_max)
    if msg.token_out:
        amounts.append(parse_amount(msg.token_out))
    return amounts


def _single(msg: MsgDelegate) -> List[Amount]:
    return [parse_amount(msg.amount)] if msg.amount else []


def _none(msg: LedgerMessage) -> List[Amount]:
    # Reward magnitudes live in ledger events, not in the message
    return []


# variant -> (type, amount extractor)
CLASSIFICATION: Dict[Type[LedgerMessage], tuple[TransactionType, Callable[[Any], List[Amount]]]] = {
    MsgSwapExactAmountIn: (TransactionType.SWAP, _swap_in),
    MsgSwapExactAmountOut: (TransactionType.SWAP, _swap_out),
    MsgSend: (TransactionType.TRANSFER, lambda msg: [parse_amount(c) for c in msg.amount]),
    MsgUndelegate: (TransactionType.UNSTAKE, _single),
    MsgDelegate: (TransactionType.STAKE, _single),
    MsgWithdrawDelegatorReward: (TransactionType.CLAIM_REWARDS, _none),
    MsgJoinPool: (TransactionType.PROVIDE_LIQUIDITY, lambda msg: [parse_amount(c) for c in msg.tokens_in]),
    MsgExitPool: (TransactionType.REMOVE_LIQUIDITY, lambda msg: [parse_amount(c) for c in msg.tokens_out]),
    MsgVote: (TransactionType.VOTE, _none),
}


def classify(message: LedgerMessage) -> ParsedMessages:
    """Type and amounts for one decoded message"""
    entry = CLASSIFICATION.get(type(message))
    if entry is None:
        return ParsedMessages(type=TransactionType.UNKNOWN)

    tx_type, extract = entry
    return ParsedMessages(type=tx_type, amounts=tuple(extract(message)))


def parse_messages(messages: Optional[Sequence[Any]], address: str = "") -> ParsedMessages:
    """
    Classify a transaction from its message list.

    Only the first message is inspected; multi-message transactions are
    classified by their first instruction. address is accepted for
    direction-aware classification but transfers are not split into
    in/out here.

    Examples:
        [MsgSend 5000000uosmo] -> transfer, [5 OSMO]
        [] or None -> unknown, []
    """
    if not messages:
        return ParsedMessages(type=TransactionType.UNKNOWN)

    return classify(decode_message(messages[0]))
