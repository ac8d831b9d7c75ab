"""
In-memory message store.
Owns every Message for the lifetime of the process and answers recency queries.
"""

import itertools
import logging
import threading
import uuid
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from msgboard.core.message import Message, utc_now

logger = logging.getLogger(__name__)


class MessageStore:
    """
    Thread-safe registry of messages keyed by id.

    The lock guards the mapping and the last issued timestamp, so ``insert``
    and ``recent`` may be called concurrently from request handlers.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        # id -> (insertion sequence, message)
        self._messages: Dict[str, Tuple[int, Message]] = {}
        self._sequence = itertools.count()
        self._last_created_at: Optional[datetime] = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)

    def insert(self, text: str, source_ip: str) -> Message:
        """
        Records a new message and returns it.
        No validation happens here: blank text is rejected by the API layer.
        """
        message_id = str(uuid.uuid4())

        with self._lock:
            created_at = self._clock()
            # Never hand out a timestamp older than the previous one.
            if self._last_created_at is not None and created_at < self._last_created_at:
                created_at = self._last_created_at
            self._last_created_at = created_at

            message = Message(id=message_id, text=text, source_ip=source_ip, created_at=created_at)
            self._messages[message_id] = (next(self._sequence), message)

        logger.debug("Stored message %s from %s", message_id, source_ip)
        return message

    def recent(self, n: int) -> List[Message]:
        """
        Returns up to ``n`` messages, newest first.
        Equal timestamps are ordered by insertion, later inserts first.
        A non-positive ``n`` yields an empty list.
        """
        if n <= 0:
            return []

        with self._lock:
            entries = list(self._messages.values())

        entries.sort(key=lambda entry: (entry[1].created_at, entry[0]), reverse=True)
        return [message for _, message in entries[:n]]
