"""
Per-Game Serialization

Decisions are pure, but a caller applying them to its own game record must
not let two requests for the same game interleave. GameSessions hands out
one lock per game identifier.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Hashable, Iterator

logger = logging.getLogger(__name__)


class GameSessions:
    """
    Registry of per-game locks.

    Usage:
        sessions = GameSessions()
        with sessions.acquire(game_id):
            decision = select_move(board, phase, mover)
            apply(decision.move)
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.Lock] = {}

    def _lock_for(self, game_id: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(game_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[game_id] = lock
            return lock

    @contextmanager
    def acquire(self, game_id: Hashable, timeout: float | None = None) -> Iterator[None]:
        """
        Hold the lock for `game_id` for the duration of the block.

        Raises:
            TimeoutError: The lock was not obtained within `timeout` seconds.
        """
        lock = self._lock_for(game_id)
        acquired = lock.acquire(timeout=-1 if timeout is None else timeout)
        if not acquired:
            raise TimeoutError(f"Game {game_id!r} is busy")
        try:
            yield
        finally:
            lock.release()

    def is_busy(self, game_id: Hashable) -> bool:
        with self._guard:
            lock = self._locks.get(game_id)
        return lock is not None and lock.locked()

    def discard(self, game_id: Hashable) -> None:
        """Forget a finished game. Does nothing while the game is busy."""
        with self._guard:
            lock = self._locks.get(game_id)
            if lock is not None and not lock.locked():
                del self._locks[game_id]
                logger.debug(f"Discarded session {game_id!r}")

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
