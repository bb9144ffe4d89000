"""
Standalone transaction intake with a WebSocket push channel.

Run with: uvicorn push_server:app --port 3001

Not used by the Streamlit pages; they get their updates from Supabase realtime.
Rows go through TransactionStore, so names are encrypted and lines validated
exactly as they are for the cashier screen.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from config import configure_logging, get_settings
from data_integrator import SupabaseBackend
from domain.errors import ObfuscationError, PersistenceError
from domain.models import PAYMENT_METHODS, OrderItem
from services.crypto_service import NameCipher
from services.transaction_store import TransactionStore, order_total

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging()
    yield


app = FastAPI(title="Warung Transaction Push API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

active_sockets: List[WebSocket] = []


def get_backend() -> SupabaseBackend:
    return SupabaseBackend()


def get_cipher() -> NameCipher:
    return NameCipher(get_settings().customer_name_key)


class TransactionIn(BaseModel):
    items: List[Dict[str, Any]] = Field(..., min_length=1)
    total: int = Field(..., ge=0)
    payment_method: str
    customer_name: Optional[str] = None


async def broadcast(message: Dict[str, Any]) -> None:
    for ws in list(active_sockets):
        try:
            await ws.send_json(message)
        except Exception as e:
            logger.warning("Dropping websocket after failed send: %s", e)
            if ws in active_sockets:
                active_sockets.remove(ws)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.post("/api/transactions", status_code=201)
async def add_transaction(body: TransactionIn):
    if body.payment_method not in PAYMENT_METHODS:
        return _error(422, f"Invalid payment_method: {body.payment_method}")

    try:
        items = [OrderItem.from_dict(raw) for raw in body.items]
    except ValueError as e:
        return _error(422, f"Invalid items: {e}")

    if order_total(items) != body.total:
        return _error(422, f"total {body.total} does not match the items ({order_total(items)})")

    try:
        store = TransactionStore(get_backend(), get_cipher())
        # supabase-py is sync; keep it off the loop serving the sockets
        transaction = await run_in_threadpool(store.create, items, body.payment_method, body.customer_name)
    except ObfuscationError as e:
        logger.error("Push intake cannot encrypt names: %s", e)
        return _error(500, str(e))
    except PersistenceError as e:
        logger.error("Push intake insert failed: %s", e.cause)
        return _error(500, e.cause or str(e))

    payload = body.model_dump()
    await broadcast({"message": "New transaction added", "data": {**payload, "id": transaction.id}})
    return {"message": "Transaction added successfully", "id": transaction.id}


@app.websocket("/ws")
async def transactions_ws(ws: WebSocket):
    active_sockets.append(ws)
    try:
        await ws.accept()
        logger.info("New WebSocket connection (%s open)", len(active_sockets))
        while True:
            message = await ws.receive_text()
            logger.debug("received: %s", message)
    except WebSocketDisconnect:
        pass
    finally:
        if ws in active_sockets:
            active_sockets.remove(ws)
