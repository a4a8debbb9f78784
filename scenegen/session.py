import logging
import os
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from .scene.encoder import EncodedImage
from .scene.models import GenerationResult, SelectedImage
from .scene.view import ViewState

logger = logging.getLogger(__name__)


@dataclass
class SessionState:
    """
    Workflow state for one page load.

    Mutations go through the methods below, which hold ``lock``.
    ``request_ticket`` is the number of the latest issued generation request;
    completions carrying an older ticket are discarded.
    """
    session_id: str
    selected: Optional[SelectedImage] = None
    encoded: Optional[EncodedImage] = None
    result: Optional[GenerationResult] = None
    view: ViewState = field(default_factory=ViewState)
    selection_id: int = 0
    request_ticket: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def select(self, image: SelectedImage) -> int:
        with self.lock:
            self.selection_id += 1
            self.selected = image
            self.encoded = None
            self.view.show_preview()
            return self.selection_id

    def store_encoding(self, selection_id: int, encoded: EncodedImage) -> bool:
        """Store ``encoded`` only if it belongs to the current selection."""
        with self.lock:
            if selection_id != self.selection_id:
                logger.info(f"[{self.session_id}] Dropping encoding for replaced selection {selection_id}")
                return False
            self.encoded = encoded
            return True

    def begin_request(self) -> int:
        with self.lock:
            self.request_ticket += 1
            self.result = None
            self.view.set_loading(True)
            self.view.hide_result()
            return self.request_ticket

    def complete_request(self, ticket: int, result: GenerationResult) -> bool:
        with self.lock:
            if ticket != self.request_ticket:
                return False
            self.result = result
            self.view.show_result()
            self.view.set_loading(False)
            return True

    def fail_request(self, ticket: int) -> bool:
        with self.lock:
            if ticket != self.request_ticket:
                return False
            self.result = None
            self.view.show_result_placeholder()
            self.view.set_loading(False)
            return True

    def snapshot(self) -> dict:
        with self.lock:
            return {
                "image": {
                    "filename": self.selected.filename,
                    "media_type": self.selected.media_type,
                    "size": len(self.selected.data),
                    "encoded": self.encoded is not None
                } if self.selected else None,
                "result": {
                    "media_type": self.result.media_type,
                    "data_url": self.result.data_url()
                } if self.result else None,
                "view": self.view.to_dict()
            }


class SessionStore:
    """
    In-memory session registry. Nothing is written to disk.

    Sessions idle for longer than ``ttl`` seconds are evicted on the next
    ``create`` or ``get``.
    """

    ENV_TTL = "SCENE_SESSION_TTL"
    DEFAULT_TTL = 1800

    def __init__(self, ttl: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl if ttl is not None else float(os.getenv(self.ENV_TTL, self.DEFAULT_TTL))
        self._clock = clock
        self._sessions: Dict[str, SessionState] = {}
        self._last_seen: Dict[str, float] = {}
        self._lock = threading.Lock()

    def _sweep(self, now: float):
        expired = [sid for sid, seen in self._last_seen.items() if now - seen > self.ttl]
        for sid in expired:
            self._sessions.pop(sid, None)
            self._last_seen.pop(sid, None)
        if expired:
            logger.info(f"Evicted {len(expired)} idle session(s)")

    def create(self) -> SessionState:
        session = SessionState(session_id=uuid.uuid4().hex)
        with self._lock:
            now = self._clock()
            self._sweep(now)
            self._sessions[session.session_id] = session
            self._last_seen[session.session_id] = now
        logger.info(f"Created session {session.session_id}")
        return session

    def get(self, session_id: Optional[str]) -> Optional[SessionState]:
        if not session_id:
            return None
        with self._lock:
            now = self._clock()
            self._sweep(now)
            session = self._sessions.get(session_id)
            if session is not None:
                self._last_seen[session_id] = now
            return session

    def discard(self, session_id: Optional[str]):
        if not session_id:
            return
        with self._lock:
            self._last_seen.pop(session_id, None)
            if self._sessions.pop(session_id, None) is not None:
                logger.info(f"Discarded session {session_id}")

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
