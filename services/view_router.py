# services/view_router.py
from __future__ import annotations

import threading
import time
import uuid
from collections import OrderedDict
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from baserow_service import BaserowService
from config import get_settings
from services.catalog_view import CatalogView
from services.product_form import ProductForm
from utils import get_logger

logger = get_logger("catalog")


class View(str, Enum):
    CATALOG = "catalog"
    CREATE = "create"


class AdminSession:
    """
    Which view a browser is on, plus that view's state.

    Leaving the catalog discards its state; coming back mounts a fresh one,
    which reloads the filter dropdown options.
    """
    def __init__(self, service: BaserowService):
        self.service = service
        self.view = View.CATALOG
        self.catalog: Optional[CatalogView] = None
        self.form: Optional[ProductForm] = None
        self.form_errors: Dict[str, str] = {}
        self.form_message: Optional[str] = None
        self._mount_catalog()

    def _mount_catalog(self) -> None:
        self.catalog = CatalogView(self.service)
        self.catalog.load_filter_options()

    def request_create(self) -> None:
        if self.view is View.CREATE:
            return
        self.view = View.CREATE
        self.catalog = None
        self.form = ProductForm()
        self.form_errors = {}
        self.form_message = None

    def cancel(self) -> None:
        self._return_to_catalog()

    def saved(self) -> None:
        self._return_to_catalog()

    def _return_to_catalog(self) -> None:
        if self.view is View.CATALOG:
            return
        self.view = View.CATALOG
        self.form = None
        self.form_errors = {}
        self.form_message = None
        self._mount_catalog()


class SessionStore:
    """
    In-memory AdminSession per session cookie.

    Sessions idle for longer than `max_age` seconds are dropped, and at most
    `max_sessions` are kept (least recently used goes first).
    """

    def __init__(self, max_age: float = 86400, max_sessions: int = 500, clock: Callable[[], float] = time.monotonic):
        self.max_age = max_age
        self.max_sessions = max_sessions
        self._clock = clock
        self._sessions: "OrderedDict[str, Tuple[AdminSession, float]]" = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def new_id() -> str:
        return uuid.uuid4().hex

    def get(self, session_id: str) -> Optional[AdminSession]:
        """Returns the live session for an id and marks it as used."""
        now = self._clock()
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None:
                return None
            session, last_seen = entry
            if now - last_seen > self.max_age:
                del self._sessions[session_id]
                return None
            self._sessions[session_id] = (session, now)
            self._sessions.move_to_end(session_id)
            return session

    def get_or_create(self, session_id: str, service: BaserowService) -> AdminSession:
        session = self.get(session_id)
        if session is not None:
            return session
        # mounting the catalog does network calls, keep it outside the lock
        created = AdminSession(service)
        with self._lock:
            entry = self._sessions.setdefault(session_id, (created, self._clock()))
        self.evict()
        return entry[0]

    def evict(self) -> int:
        """Drops expired sessions, then the oldest ones beyond `max_sessions`."""
        now = self._clock()
        with self._lock:
            stale = [sid for sid, (_, last_seen) in self._sessions.items() if now - last_seen > self.max_age]
            overflow = len(self._sessions) - len(stale) - self.max_sessions
            if overflow > 0:
                live = [sid for sid in self._sessions if sid not in stale]
                stale.extend(live[:overflow])
        for session_id in stale:
            self.drop(session_id)
        if stale:
            logger.info("Evicted %d admin sessions", len(stale))
        return len(stale)

    def drop(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)


sessions = SessionStore(
    max_age=get_settings().session_max_age,
    max_sessions=get_settings().max_sessions,
)
