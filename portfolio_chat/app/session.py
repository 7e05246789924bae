#!/usr/bin/env python3
"""
Conversation storage for the portfolio chatbot.

Keeps a bounded, ordered log of turns per session. An in-process store is the
default; a Redis-backed store can be selected so several workers share one
history.
"""

import threading
from typing import Dict, List

import redis

from .config import Config
from ..schemas.io_models import ConversationTurn, DEFAULT_SESSION
from ..utils.logger import get_logger

logger = get_logger()


class ConversationStore:
    """In-memory conversation history, capped at ``max_turns`` per session.

    Turns are kept in the order they were appended. The store does not check
    that roles alternate; the controller is the only writer and keeps them
    alternating on the success path.
    """

    def __init__(self, max_turns: int = None):
        self.max_turns = max_turns or Config.MAX_CONVERSATION_TURNS
        self._lock = threading.Lock()
        self._sessions: Dict[str, List[ConversationTurn]] = {}

    def append(self, turn: ConversationTurn, session_id: str = DEFAULT_SESSION):
        """Add a turn at the tail, then drop from the head down to the cap."""
        with self._lock:
            turns = self._sessions.setdefault(session_id, [])
            turns.append(turn)
            overflow = len(turns) - self.max_turns
            if overflow > 0:
                del turns[:overflow]

    def recent_window(self, max_turns: int, session_id: str = DEFAULT_SESSION) -> List[ConversationTurn]:
        """Return up to the last ``max_turns`` turns, oldest first."""
        if max_turns <= 0:
            return []
        with self._lock:
            return list(self._sessions.get(session_id, [])[-max_turns:])

    def length(self, session_id: str = DEFAULT_SESSION) -> int:
        with self._lock:
            return len(self._sessions.get(session_id, []))

    def clear(self, session_id: str = DEFAULT_SESSION) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None


class RedisConversationStore:
    """Conversation history kept in one Redis list per session."""

    def __init__(self, redis_client, max_turns: int = None):
        self.redis_client = redis_client
        self.max_turns = max_turns or Config.MAX_CONVERSATION_TURNS

    def _get_session_key(self, session_id: str) -> str:
        return f"conversation:{session_id}"

    def append(self, turn: ConversationTurn, session_id: str = DEFAULT_SESSION):
        key = self._get_session_key(session_id)
        # RPUSH + LTRIM run as one MULTI/EXEC so readers never see an untrimmed list
        pipe = self.redis_client.pipeline(transaction=True)
        pipe.rpush(key, turn.model_dump_json())
        pipe.ltrim(key, -self.max_turns, -1)
        pipe.execute()

    def recent_window(self, max_turns: int, session_id: str = DEFAULT_SESSION) -> List[ConversationTurn]:
        if max_turns <= 0:
            return []
        raw = self.redis_client.lrange(self._get_session_key(session_id), -max_turns, -1)
        return [ConversationTurn.model_validate_json(item) for item in raw]

    def length(self, session_id: str = DEFAULT_SESSION) -> int:
        return int(self.redis_client.llen(self._get_session_key(session_id)))

    def clear(self, session_id: str = DEFAULT_SESSION) -> bool:
        return bool(self.redis_client.delete(self._get_session_key(session_id)))


def create_conversation_store(backend: str = None):
    """Build the configured store, falling back to memory if Redis is down."""
    backend = (backend or Config.CONVERSATION_BACKEND).lower()
    if backend == "redis":
        try:
            client = redis.Redis(
                host=Config.REDIS_HOST,
                port=Config.REDIS_PORT,
                db=Config.REDIS_DB,
                decode_responses=True,
                socket_connect_timeout=2,
            )
            client.ping()
            logger.info("Using Redis for conversation storage")
            return RedisConversationStore(client)
        except redis.RedisError as e:
            logger.warning(f"Redis not available ({e}), using in-memory conversation storage")
    return ConversationStore()
