from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse
from pathlib import Path
import json
import os
import re

app = FastAPI(title="Mock Ledger Server", version="1.0.0")
# Support both local development and Docker
STUB_FILE = Path(os.getenv("LEDGER_STUB_FILE", Path(__file__).resolve().parent / "ledger_stub.json"))

_ADDRESS = re.compile(r"='([a-z0-9]+)'")


def _stub() -> dict:
    return json.loads(STUB_FILE.read_text())


def _involves(record: dict, addresses: set) -> bool:
    return bool(addresses & set(record.get("involves", [])))


@app.get("/health")
def health(): return {"status": "ok"}


@app.get("/cosmos/base/tendermint/v1beta1/node_info")
def node_info():
    return {"default_node_info": {"network": _stub()["chain_id"]}}


@app.get("/cosmos/tx/v1beta1/txs")
def search_txs(query: str = Query(...), page: int = Query(1, ge=1), limit: int = Query(100, ge=1)):
    addresses = set(_ADDRESS.findall(query))
    matching = [r for r in _stub()["tx_responses"] if _involves(r, addresses)]
    start = (page - 1) * limit
    return JSONResponse(content={
        "tx_responses": matching[start:start + limit],
        "total": str(len(matching)),
    })


@app.get("/cosmos/tx/v1beta1/txs/{tx_hash}")
def get_tx(tx_hash: str):
    for record in _stub()["tx_responses"]:
        if record["txhash"] == tx_hash:
            return JSONResponse(content={"tx_response": record})
    raise HTTPException(status_code=404, detail=f"tx not found: {tx_hash}")
