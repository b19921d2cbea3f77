"""WebSocket endpoints: live claim countdown and debounced search.

Protocol (countdown, ``/ws/claims/{claim_id}?token=...``):
    Server -> Client:
        {"type": "claim", "claim": {...}}           on connect, and once more
                                                    after the countdown ends
        {"type": "countdown", "countdown": {...}}   every tick while active
        {"type": "error", "status": 404, "message": "..."}

Protocol (search, ``/ws/search``):
    Client -> Server:
        {"query": "...", "tab": "all"}
        {"action": "ping"}
    Server -> Client:
        {"type": "results", "feed": {...}}
        {"type": "error", "message": "..."}
        {"type": "pong"}
"""

import asyncio
import json
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any

import structlog
from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from talabahub.auth.session import SessionContext
from talabahub.claims import lifecycle
from talabahub.claims.lifecycle import ClaimStatus
from talabahub.claims.schemas import DiscountClaim
from talabahub.claims.service import countdown_response, get_claim, present_claim
from talabahub.config import get_settings
from talabahub.feed.debounce import Debouncer
from talabahub.feed.service import search_feed
from talabahub.upstream.client import get_upstream
from talabahub.upstream.errors import UpstreamError, UpstreamUnavailable

logger = structlog.get_logger()

router = APIRouter()

Send = Callable[[dict[str, Any]], Awaitable[None]]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _claim_frame(claim: DiscountClaim) -> dict[str, Any]:
    return {"type": "claim", "claim": present_claim(claim, _now()).model_dump(mode="json")}


async def stream_countdown(
    send: Send,
    claim: DiscountClaim,
    refresh: Callable[[], Awaitable[DiscountClaim]],
    interval: float,
) -> None:
    """Tick the countdown of an active claim until it reaches zero.

    At zero the last frame carries ``expired: true`` while the status is left
    alone; the claim is then re-read once and its backend status sent.
    """
    await send(_claim_frame(claim))
    if claim.status != ClaimStatus.ACTIVE:
        return

    while True:
        await asyncio.sleep(interval)
        countdown = lifecycle.compute_countdown(claim.expires_at, _now())
        await send({
            "type": "countdown",
            "claim_id": claim.id,
            "countdown": countdown_response(countdown).model_dump(),
        })
        if countdown.expired:
            break

    fresh = await refresh()
    if lifecycle.is_regression(claim.status, fresh.status):
        logger.warning(
            "claim_status_regression",
            claim_id=claim.id,
            previous=claim.status.value,
            observed=fresh.status.value,
        )
    await send(_claim_frame(fresh))


async def _drain(websocket: WebSocket) -> None:
    """Read until the client goes away."""
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        return


@router.websocket("/ws/claims/{claim_id}")
async def claim_countdown(
    websocket: WebSocket,
    claim_id: str,
    token: str = Query(...),
) -> None:
    """Live countdown for one claim; the ticker stops when the client disconnects."""
    session = SessionContext.from_token(token)
    if not session.is_authenticated:
        await websocket.close(code=4001, reason="Authentication failed")
        return

    await websocket.accept()
    upstream = get_upstream()
    try:
        claim = await get_claim(upstream, session, claim_id)
    except UpstreamError as e:
        await websocket.send_json({"type": "error", "status": e.status, "message": e.message})
        await websocket.close(code=4000 + e.status if e.status < 1000 else 4000)
        return
    except UpstreamUnavailable:
        await websocket.send_json({"type": "error", "status": 502, "message": "Backend unavailable"})
        await websocket.close(code=1011)
        return

    ticker = asyncio.create_task(
        stream_countdown(
            websocket.send_json,
            claim,
            lambda: get_claim(upstream, session, claim_id),
            get_settings().countdown_tick_seconds,
        ),
    )
    reader = asyncio.create_task(_drain(websocket))
    try:
        done, _ = await asyncio.wait({ticker, reader}, return_when=asyncio.FIRST_COMPLETED)
        if ticker in done:
            exc = ticker.exception()
            if exc is not None:
                logger.warning("claim_countdown_failed", claim_id=claim_id, error=str(exc))
                await websocket.send_json({"type": "error", "message": str(exc)})
            await websocket.close()
    finally:
        for task in (ticker, reader):
            task.cancel()
        await asyncio.gather(ticker, reader, return_exceptions=True)
        logger.debug("claim_countdown_closed", claim_id=claim_id)


@router.websocket("/ws/search")
async def live_search(websocket: WebSocket) -> None:
    """Search as the user types; only the last query of a burst reaches the backend."""
    await websocket.accept()
    upstream = get_upstream()
    settings = get_settings()
    debouncer = Debouncer(settings.search_debounce_seconds)

    async def run_search(query: str, tab: str) -> None:
        try:
            feed = await search_feed(upstream, query, tab=tab)
        except (UpstreamError, UpstreamUnavailable) as e:
            await websocket.send_json({"type": "error", "message": str(e)})
            return
        await websocket.send_json({"type": "results", "feed": feed.model_dump(mode="json")})

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                await websocket.send_json({"type": "error", "message": "Invalid JSON"})
                continue
            if not isinstance(msg, dict):
                await websocket.send_json({"type": "error", "message": "Invalid message"})
                continue

            if msg.get("action") == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            debouncer.submit(run_search, str(msg.get("query", "")), str(msg.get("tab") or "all"))
    except WebSocketDisconnect:
        pass
    finally:
        await debouncer.cancel()
