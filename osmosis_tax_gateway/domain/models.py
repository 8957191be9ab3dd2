"""Domain models - pure Python dataclasses representing ledger entities"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class TransactionType(str, Enum):
    """Economic meaning of a transaction, derived from its first message"""

    SWAP = "swap"
    TRANSFER = "transfer"
    STAKE = "stake"
    UNSTAKE = "unstake"
    CLAIM_REWARDS = "claim_rewards"
    PROVIDE_LIQUIDITY = "provide_liquidity"
    REMOVE_LIQUIDITY = "remove_liquidity"
    VOTE = "vote"
    UNKNOWN = "unknown"


class TransactionStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    PENDING = "pending"

    @classmethod
    def from_code(cls, code: int) -> "TransactionStatus":
        """Ledger result code: zero is success, anything else failed"""
        return cls.SUCCESS if code == 0 else cls.FAILED


@dataclass(frozen=True)
class Amount:
    """Token amount as an exact decimal string"""

    value: str  # e.g. "1.234567", never a float
    denom: str  # e.g. "uosmo", "ibc/27394FB0..."
    symbol: str  # e.g. "OSMO"


@dataclass(frozen=True)
class Transaction:
    """Normalized ledger transaction"""

    hash: str
    timestamp: datetime
    type: TransactionType
    status: TransactionStatus
    amounts: Tuple[Amount, ...]  # order matters: sent/in first, received/out after
    fee: Amount
    memo: Optional[str] = None


@dataclass(frozen=True)
class TransactionDetail(Transaction):
    """Transaction plus raw execution data, from a single-hash lookup"""

    block_height: int = 0
    gas_used: int = 0
    gas_wanted: int = 0
    raw_log: Optional[str] = None
    messages: Tuple[Dict[str, Any], ...] = ()


@dataclass(frozen=True)
class ParsedMessages:
    """Classifier output for one transaction"""

    type: TransactionType
    amounts: Tuple[Amount, ...] = ()


@dataclass
class FetchOptions:
    """Pagination and date filtering for a history fetch"""

    limit: Optional[int] = None  # overall cap on returned transactions
    page_size: Optional[int] = None  # defaults to limit, then settings.default_page_size
    offset: int = 0
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


@dataclass
class FetchResult:
    """
    Outcome of paging through an address's history.

    complete is False when a page request failed and pagination stopped
    early; transactions then holds everything accumulated before the failure.
    """

    address: str
    transactions: List[Transaction] = field(default_factory=list)
    complete: bool = True
    error: Optional[str] = None
    pages_fetched: int = 0

    def __len__(self) -> int:
        return len(self.transactions)

    def __iter__(self):
        return iter(self.transactions)
