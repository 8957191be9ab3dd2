"""Unit tests for the LCD HTTP connection"""

import httpx
import pytest
from osmosis_tax_gateway.domain.exceptions import LedgerAPIError
from osmosis_tax_gateway.infrastructure.clients.lcd import (
    NODE_INFO_PATH,
    TXS_PATH,
    LcdConnection,
    RawTxRecord,
    search_query,
)


BASE_URL = "http://lcd.test"


def _node_info() -> httpx.Response:
    return httpx.Response(200, json={"default_node_info": {"network": "osmosis-1"}})


def _transport(routes: dict, seen: list | None = None) -> httpx.MockTransport:
    """Serve path -> Response (or callable(request) -> Response); 404 for anything else"""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        route = routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"message": "not found"})
        return route(request) if callable(route) else route

    return httpx.MockTransport(handler)


async def _connect(routes: dict, seen: list | None = None) -> LcdConnection:
    return await LcdConnection.connect(BASE_URL, 5.0, transport=_transport({NODE_INFO_PATH: _node_info(), **routes}, seen))


async def test_connect_reads_chain_id():
    """Test connect probes node info"""
    connection = await _connect({})
    assert connection.chain_id == "osmosis-1"
    await connection.close()


async def test_connect_failure_raises():
    """Test unreachable or non-LCD endpoint raises LedgerAPIError"""
    transport = httpx.MockTransport(lambda request: httpx.Response(502))
    with pytest.raises(LedgerAPIError):
        await LcdConnection.connect(BASE_URL, 5.0, transport=transport)


async def test_search_txs_sends_query_and_paging():
    """Test search parameters and record parsing"""
    seen = []
    records = [
        {"txhash": "AAA", "height": "10", "code": 0, "gas_used": "1", "gas_wanted": "2", "tx": {}},
        {"hash": "BBB", "height": 11, "gasUsed": "3", "rawLog": "log", "tx": {"authInfo": {"fee": {"amount": []}}}},
    ]
    connection = await _connect({TXS_PATH: httpx.Response(200, json={"tx_responses": records})}, seen)

    result = await connection.search_txs(search_query("osmo1x"), page=2, limit=50)

    assert [r.hash for r in result] == ["AAA", "BBB"]
    assert result.records[0].height == 10
    assert result.records[1].gas_used == 3
    assert result.records[1].raw_log == "log"

    params = seen[-1].url.params
    assert params["query"] == "message.sender='osmo1x' OR transfer.recipient='osmo1x'"
    assert params["page"] == "2"
    assert params["limit"] == "50"
    await connection.close()


async def test_search_txs_null_page_is_empty():
    """Test missing tx_responses is an empty page"""
    connection = await _connect({TXS_PATH: httpx.Response(200, json={"tx_responses": None})})
    assert len(await connection.search_txs("q", page=1, limit=10)) == 0
    await connection.close()


async def test_search_txs_http_error():
    """Test server error raises LedgerAPIError with the status"""
    connection = await _connect({TXS_PATH: httpx.Response(500)})
    with pytest.raises(LedgerAPIError, match="500"):
        await connection.search_txs("q", page=3, limit=10)
    await connection.close()


async def test_search_txs_timeout():
    """Test timeout raises LedgerAPIError naming the page"""

    def timeout(request):
        raise httpx.ReadTimeout("timed out", request=request)

    connection = await _connect({TXS_PATH: timeout})
    with pytest.raises(LedgerAPIError, match="page 4"):
        await connection.search_txs("q", page=4, limit=10)
    await connection.close()


async def test_search_txs_keeps_page_around_malformed_records():
    """Test a malformed record is skipped while the rest of the page is kept"""
    good = {"txhash": "GOOD", "height": "10", "tx": {"body": {"memo": "ok"}}}
    nulls = {
        "txhash": "NULLS",
        "height": None,
        "gas_used": None,
        "tx": {
            "body": {"messages": None, "memo": None},
            "auth_info": {"fee": {"amount": [{"denom": None, "amount": None}]}},
        },
    }
    no_hash = {"height": "12"}
    bad_amount = {"txhash": "BAD", "tx": {"auth_info": {"fee": {"amount": [{"denom": "uosmo", "amount": "abc"}]}}}}
    connection = await _connect({
        TXS_PATH: httpx.Response(200, json={"tx_responses": [good, nulls, no_hash, bad_amount, "junk"]}),
    })

    page = await connection.search_txs("q", page=1, limit=5)

    assert [r.hash for r in page] == ["GOOD", "NULLS"]
    assert page.skipped == 3
    assert len(page) == 5

    defaulted = page.records[1]
    assert defaulted.height == 0
    assert defaulted.gas_used == 0
    assert defaulted.tx.body.memo == ""
    assert defaulted.tx.body.messages == []
    assert defaulted.tx.auth_info.fee.amount[0].denom == "unknown"
    assert defaulted.tx.auth_info.fee.amount[0].amount == "0"
    await connection.close()


async def test_search_txs_null_sections():
    """Test null tx, body and fee sections take their defaults"""
    records = [
        {"txhash": "A", "tx": None},
        {"txhash": "B", "tx": {"body": None, "auth_info": None}},
        {"txhash": "C", "tx": {"auth_info": {"fee": {"amount": None}}}},
    ]
    connection = await _connect({TXS_PATH: httpx.Response(200, json={"tx_responses": records})})

    page = await connection.search_txs("q", page=1, limit=10)

    assert [r.hash for r in page] == ["A", "B", "C"]
    assert page.skipped == 0
    assert page.records[2].tx.auth_info.fee.amount == []
    await connection.close()


async def test_search_txs_invalid_payload():
    """Test a response that is not a search object raises LedgerAPIError"""
    connection = await _connect({TXS_PATH: httpx.Response(200, json=["not", "a", "page"])})
    with pytest.raises(LedgerAPIError, match="Invalid transaction data"):
        await connection.search_txs("q", page=1, limit=10)
    await connection.close()


async def test_get_tx_found():
    """Test lookup unwraps tx_response"""
    connection = await _connect({
        f"{TXS_PATH}/ABC": httpx.Response(200, json={"tx_response": {"txhash": "ABC", "height": "7"}}),
    })

    record = await connection.get_tx("ABC")

    assert isinstance(record, RawTxRecord)
    assert record.hash == "ABC"
    assert record.height == 7
    assert record.tx.body.messages == []
    await connection.close()


async def test_get_tx_not_found():
    """Test 404 is reported as None"""
    connection = await _connect({})
    assert await connection.get_tx("MISSING") is None
    await connection.close()


async def test_get_tx_server_error():
    """Test non-404 errors raise LedgerAPIError"""
    connection = await _connect({f"{TXS_PATH}/ABC": httpx.Response(503)})
    with pytest.raises(LedgerAPIError, match="503"):
        await connection.get_tx("ABC")
    await connection.close()
