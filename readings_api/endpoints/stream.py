"""WebSocket push channel for dashboard clients.

Protocol (server → client only):
1. On connect → {type: "latest-reading", data} if any reading exists
2. Per ingested reading → {type: "new-reading", data}

Client messages are read and ignored; they only serve to detect disconnect.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, WebSocket, status

from ..broadcast.hub import BroadcastHub, Subscriber
from ..pipelines.ingestion import IngestionPipeline
from .deps import get_hub, get_pipeline

router = APIRouter(tags=["stream"])
logger = logging.getLogger(__name__)


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


async def _pump(websocket: WebSocket, subscriber: Subscriber) -> None:
    while True:
        message = await subscriber.next_message()
        if message is None:
            # Evicted by the hub (slow consumer) or shutting down.
            try:
                await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER)
            except Exception:
                logger.debug("[WS] Close after eviction failed id=%d", subscriber.id)
            return
        try:
            await websocket.send_json(message)
        except Exception as e:
            logger.warning("[WS] Send failed id=%d err=%s", subscriber.id, type(e).__name__)
            return


@router.websocket("/")
@router.websocket("/ws")
async def reading_stream(
    websocket: WebSocket,
    hub: BroadcastHub = Depends(get_hub),
    pipeline: IngestionPipeline = Depends(get_pipeline),
):
    await websocket.accept()

    subscriber = None
    tasks = []
    try:
        subscriber = await pipeline.open_subscription()
        logger.info("[WS] Client connected id=%d", subscriber.id)

        tasks = [
            asyncio.create_task(_wait_for_disconnect(websocket)),
            asyncio.create_task(_pump(websocket, subscriber)),
        ]
        await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    except Exception:
        logger.exception("[WS] Session error")
    finally:
        if subscriber is not None:
            hub.unsubscribe(subscriber)
            logger.info("[WS] Client disconnected id=%d", subscriber.id)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
