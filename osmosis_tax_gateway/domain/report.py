"""Tax-report (Awaken Tax CSV) mapping and encoding"""

import csv
import io
from dataclasses import dataclass, fields
from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from osmosis_tax_gateway.config import settings
from osmosis_tax_gateway.domain.models import Amount, Transaction, TransactionType

REPORT_COLUMNS = (
    "Date",
    "Type",
    "Buy Amount",
    "Buy Currency",
    "Sell Amount",
    "Sell Currency",
    "Fee Amount",
    "Fee Currency",
    "Exchange",
    "Transaction ID",
)

REPORT_TYPES = {
    TransactionType.SWAP: "Trade",
    TransactionType.TRANSFER: "Transfer",
    TransactionType.STAKE: "Stake",
    TransactionType.UNSTAKE: "Unstake",
    TransactionType.CLAIM_REWARDS: "Income",
    TransactionType.PROVIDE_LIQUIDITY: "Trade",
    TransactionType.REMOVE_LIQUIDITY: "Trade",
    TransactionType.VOTE: "Other",
    TransactionType.UNKNOWN: "Other",
}

# Joins the pool tokens of a liquidity event into one cell
LIQUIDITY_SEPARATOR = "+"


@dataclass
class ReportRow:
    """One transaction in the report's fixed ten-column schema"""

    date: str
    type: str
    buy_amount: str = ""
    buy_currency: str = ""
    sell_amount: str = ""
    sell_currency: str = ""
    fee_amount: str = ""
    fee_currency: str = ""
    exchange: str = ""
    transaction_id: str = ""

    def values(self) -> List[str]:
        """Field values in REPORT_COLUMNS order"""
        return [getattr(self, f.name) for f in fields(self)]

    def as_dict(self) -> Dict[str, str]:
        return dict(zip(REPORT_COLUMNS, self.values()))


def format_report_date(timestamp: datetime) -> str:
    """UTC instant as YYYY-MM-DDTHH:MM:SSZ; naive datetimes are taken as UTC"""
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _set_buy(row: ReportRow, amounts: Sequence[Amount]) -> None:
    row.buy_amount = LIQUIDITY_SEPARATOR.join(a.value for a in amounts)
    row.buy_currency = LIQUIDITY_SEPARATOR.join(a.symbol for a in amounts)


def _set_sell(row: ReportRow, amounts: Sequence[Amount]) -> None:
    row.sell_amount = LIQUIDITY_SEPARATOR.join(a.value for a in amounts)
    row.sell_currency = LIQUIDITY_SEPARATOR.join(a.symbol for a in amounts)


def map_transaction(tx: Transaction, exchange: Optional[str] = None) -> ReportRow:
    """
    Map a transaction onto the report schema.

    Amount placement by type:
    - swap: amounts[0] sold, amounts[1] bought (a lone amount is sold)
    - transfer, stake: first amount sold (transfer direction is not inferred)
    - unstake, claim_rewards: first amount bought
    - provide_liquidity: every token in, joined with "+", sold; the pool
      share received is unknown and left for manual entry
    - remove_liquidity: every token out, joined with "+", bought
    - vote, unknown: no amounts
    """
    row = ReportRow(
        date=format_report_date(tx.timestamp),
        type=REPORT_TYPES.get(tx.type, "Other"),
        fee_amount=tx.fee.value,
        fee_currency=tx.fee.symbol,
        exchange=exchange or settings.exchange_name,
        transaction_id=tx.hash,
    )
    amounts = tx.amounts

    if tx.type == TransactionType.SWAP:
        if amounts:
            _set_sell(row, amounts[:1])
        if len(amounts) >= 2:
            _set_buy(row, amounts[1:2])
    elif tx.type in (TransactionType.TRANSFER, TransactionType.STAKE):
        _set_sell(row, amounts[:1])
    elif tx.type in (TransactionType.UNSTAKE, TransactionType.CLAIM_REWARDS):
        _set_buy(row, amounts[:1])
    elif tx.type == TransactionType.PROVIDE_LIQUIDITY:
        _set_sell(row, amounts)
    elif tx.type == TransactionType.REMOVE_LIQUIDITY:
        _set_buy(row, amounts)

    return row


def encode_rows(rows: Iterable[ReportRow]) -> str:
    """
    Encode rows as CSV text: header first, "\\n" between rows, no trailing newline.

    Only fields containing a comma, a double quote or a newline are quoted,
    with inner quotes doubled.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(REPORT_COLUMNS)
    for row in rows:
        writer.writerow(row.values())

    return buf.getvalue()[: -len("\n")]


def export_to_report(transactions: Iterable[Transaction]) -> str:
    """CSV report for transactions, in the order given"""
    return encode_rows(map_transaction(tx) for tx in transactions)


def read_report(text: str) -> List[Dict[str, str]]:
    """Decode a report document back into one column->value dict per row"""
    reader = csv.DictReader(io.StringIO(text, newline=""))
    return [dict(row) for row in reader]


def generate_filename(address: str, on: Optional[date] = None) -> str:
    """osmosis-transactions-<address>-<YYYY-MM-DD>.csv, dated today (UTC) by default"""
    if on is None:
        on = datetime.now(timezone.utc).date()
    elif isinstance(on, datetime):
        on = (on if on.tzinfo else on.replace(tzinfo=timezone.utc)).astimezone(timezone.utc).date()
    return f"{settings.export_filename_prefix}-{address}-{on.isoformat()}.csv"
