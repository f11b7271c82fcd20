"""WebSocket router for debounced live search.

Each connection owns one SearchController; keystrokes arrive as
{"type": "search", "term": "..."} and only the last one of a burst
produces a {"type": "search_results", ...} reply.
"""

import asyncio
import time
from typing import Any, Dict

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from constants import results_label
from core.container import container
from core.logging import get_logger
from services.search import SearchController, SearchResult

logger = get_logger(__name__)

router = APIRouter(tags=["search"])


@router.websocket("/ws/search")
async def websocket_search(websocket: WebSocket):
    """Live search endpoint used by the page's search box."""
    session = container.site_session()
    await websocket.accept()
    await session.initialize()

    send_lock = asyncio.Lock()

    async def safe_send(data: Dict[str, Any]):
        async with send_lock:
            try:
                await websocket.send_json(data)
            except Exception as e:
                logger.error(f"[Search WS] Send error: {e}")

    async def send_results(result: SearchResult):
        await safe_send({
            "type": "search_results",
            "term": result.term,
            "state": result.state.value,
            "count": result.count,
            "counter": results_label(result.count),
            "html": session.render_result_html(result),
        })

    controller = SearchController(
        session.store,
        on_results=send_results,
        delay=session.settings.search_debounce_seconds,
    )

    try:
        while True:
            data = await websocket.receive_json()
            msg_type = data.get("type", "") if isinstance(data, dict) else ""

            if msg_type == "search":
                controller.on_input(str(data.get("term") or ""))
            elif msg_type == "ping":
                await safe_send({"type": "pong", "timestamp": time.time()})
            else:
                logger.warning("Unknown message type", msg_type=msg_type)
                await safe_send({
                    "type": "error",
                    "code": "UNKNOWN_MESSAGE_TYPE",
                    "message": f"Unknown message type: {msg_type}"
                })

    except WebSocketDisconnect:
        pass  # Normal disconnect
    except Exception as e:
        logger.error(f"[Search WS] Receive error: {e}")
    finally:
        await controller.close()
