# app/transport/ws_manager.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from fastapi import WebSocket

logger = logging.getLogger(__name__)


@dataclass
class Conn:
    session_id: str
    ws: WebSocket


class WSManager:
    """
    In-memory connection registry.
    - room_id -> session_id -> websocket
    Transport-only: no store, no domain rules.
    """
    def __init__(self) -> None:
        self._rooms: Dict[str, Dict[str, Conn]] = {}
        self._lock = asyncio.Lock()

    async def add(self, room_id: str, session_id: str, ws: WebSocket) -> None:
        async with self._lock:
            self._rooms.setdefault(room_id, {})[session_id] = Conn(session_id=session_id, ws=ws)

    async def remove(self, room_id: str, session_id: str, ws: Optional[WebSocket] = None) -> None:
        async with self._lock:
            room = self._rooms.get(room_id)
            if not room:
                return
            conn = room.get(session_id)
            # a newer tab may have taken over this session; leave it registered
            if conn is not None and (ws is None or conn.ws is ws):
                room.pop(session_id, None)
            if not room:
                self._rooms.pop(room_id, None)

    async def send_to(self, room_id: str, session_id: str, event: dict) -> None:
        async with self._lock:
            room = self._rooms.get(room_id, {})
            conn = room.get(session_id)
        if conn is None:
            return
        try:
            await conn.ws.send_json(event)
        except Exception:
            # dead socket; ws.py cleans up on disconnect
            logger.debug("[%s] send to %s failed", room_id, session_id, exc_info=True)

    async def broadcast(self, room_id: str, event: dict, exclude_session: Optional[str] = None) -> None:
        # copy conns under lock, send outside lock
        async with self._lock:
            room = self._rooms.get(room_id, {})
            conns = list(room.values())

        for c in conns:
            if exclude_session and c.session_id == exclude_session:
                continue
            try:
                await c.ws.send_json(event)
            except Exception:
                logger.debug("[%s] broadcast to %s failed", room_id, c.session_id, exc_info=True)

    async def deliver(self, room_id: str, events: list, exclude_session: Optional[str] = None) -> None:
        """
        Route to_room events: targeted ones (with "targets") go to those sessions,
        the rest are broadcast.
        """
        for e in events:
            if isinstance(e, dict) and "targets" in e:
                targets = e.get("targets") or []
                payload = {k: v for k, v in e.items() if k != "targets"}
                for t in targets:
                    await self.send_to(room_id, t, payload)
                continue
            await self.broadcast(room_id, e, exclude_session=exclude_session)

    async def room_size(self, room_id: str) -> int:
        async with self._lock:
            return len(self._rooms.get(room_id, {}))
