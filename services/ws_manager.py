from typing import Dict, Set, Any, Callable, List, Optional
from fastapi import WebSocket
import asyncio
import logging

logger = logging.getLogger(__name__)

BROADCAST_ROOM = "all"


class Connection:
    def __init__(self, websocket: WebSocket, user_id: int, role: str):
        self.websocket = websocket
        self.user_id = user_id
        self.role = role
        self.rooms: Set[str] = set()


class ConnectionManager:
    """Push-event hub.

    In-process listeners register per event name with ``subscribe``; WebSocket
    clients are grouped in rooms. ``publish`` feeds both.
    """

    def __init__(self):
        # room -> set of Connection
        self.active_connections: Dict[str, Set[Connection]] = {}
        # event name -> handlers, in registration order
        self._listeners: Dict[str, List[Callable[[dict], Any]]] = {}
        self._lock = asyncio.Lock()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    # --- in-process listeners -------------------------------------------

    def subscribe(self, event: str, handler: Callable[[dict], Any]) -> Callable[[], None]:
        self._listeners.setdefault(event, []).append(handler)

        def unsubscribe():
            handlers = self._listeners.get(event)
            if handlers and handler in handlers:
                handlers.remove(handler)
                if not handlers:
                    del self._listeners[event]

        return unsubscribe

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    # --- websocket connections ------------------------------------------

    async def connect(self, websocket: WebSocket, user_id: int, role: str, rooms: List[str] = None):
        self._loop = asyncio.get_running_loop()
        conn = Connection(websocket, user_id, role)
        wanted = {BROADCAST_ROOM, f"user_{user_id}", f"role:{role}"} | set(rooms or [])
        async with self._lock:
            for room in wanted:
                self.active_connections.setdefault(room, set()).add(conn)
                conn.rooms.add(room)
        logger.info(f"User {user_id} connected to rooms: {sorted(conn.rooms)}")
        return conn

    async def join(self, conn: Connection, room: str):
        async with self._lock:
            self.active_connections.setdefault(room, set()).add(conn)
            conn.rooms.add(room)
        logger.info(f"User {conn.user_id} joined room: {room}")

    async def leave(self, conn: Connection, room: str):
        async with self._lock:
            self._discard(conn, room)
        logger.info(f"User {conn.user_id} left room: {room}")

    async def disconnect(self, conn: Connection):
        async with self._lock:
            for room in list(conn.rooms):
                self._discard(conn, room)
        logger.info(f"User {conn.user_id} disconnected")

    def _discard(self, conn: Connection, room: str):
        conn.rooms.discard(room)
        if room in self.active_connections:
            self.active_connections[room].discard(conn)
            if not self.active_connections[room]:
                del self.active_connections[room]

    def is_user_connected(self, user_id: int) -> bool:
        return f"user_{user_id}" in self.active_connections

    def connected_users_count(self) -> int:
        return len({c.user_id for c in self.active_connections.get(BROADCAST_ROOM, set())})

    def active_rooms(self) -> List[str]:
        return sorted(self.active_connections.keys())

    async def broadcast(self, room: str, message: dict):
        conns = []
        async with self._lock:
            if room in self.active_connections:
                conns = list(self.active_connections[room])
        for c in conns:
            try:
                await c.websocket.send_json(message)
            except Exception as e:
                # client may have gone away mid-send
                logger.warning(f"Failed to deliver to user {c.user_id}: {e}")

    # --- publishing -----------------------------------------------------

    def publish(self, event: str, data: dict, room: Optional[str] = None):
        """Deliver ``data`` to in-process listeners, then to WebSocket clients in ``room``."""
        for handler in list(self._listeners.get(event, [])):
            try:
                handler(data)
            except Exception as e:
                logger.error(f"Listener for {event} failed: {e}")

        target = room or BROADCAST_ROOM
        if target not in self.active_connections:
            return
        coro = self.broadcast(target, {"event": event, "data": data})
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            loop.create_task(coro)
        elif self._loop is not None and self._loop.is_running():
            # called from a worker thread (sync route); hand over to the server loop
            asyncio.run_coroutine_threadsafe(coro, self._loop)
        else:
            coro.close()


manager = ConnectionManager()
