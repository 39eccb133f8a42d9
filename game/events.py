# game/events.py
"""Session notifications delivered to observer callbacks."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Dict, Iterable, List, Optional

from game.move import Move
from game.player import Player


logger = logging.getLogger(__name__)


class SessionEventType(Enum):
    """Everything an observer can be told about."""

    # Roster
    PLAYER_JOINED = auto()
    PLAYER_REMOVED = auto()
    CONNECTION_CHANGED = auto()

    # Lifecycle
    STATE_CHANGED = auto()
    GAME_PAUSED = auto()
    GAME_RESUMED = auto()
    NEW_ROUND = auto()
    GAME_FINISHED = auto()

    # Play
    MOVE_APPLIED = auto()
    MOVE_REJECTED = auto()
    TURN_CHANGED = auto()


@dataclass
class SessionEvent:
    """Something that happened to a session, after the fact."""

    type: SessionEventType
    session: Any
    player: Optional[Player] = None
    move: Optional[Move] = None
    data: Dict[str, Any] = field(default_factory=dict)


Observer = Callable[[SessionEvent], None]


class ObserverList:
    """
    Ordered list of observer callbacks.

    Observers run in registration order. A failing observer is logged and
    skipped; it never aborts the mutation that triggered the notification.
    """

    def __init__(self, observers: Optional[Iterable[Observer]] = None):
        self._observers: List[Observer] = list(observers or [])

    def add(self, observer: Observer) -> None:
        self._observers.append(observer)

    def remove(self, observer: Observer) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def clear(self) -> None:
        self._observers.clear()

    def __len__(self) -> int:
        return len(self._observers)

    def __iter__(self):
        return iter(list(self._observers))

    def notify(self, event: SessionEvent) -> None:
        for observer in list(self._observers):
            try:
                observer(event)
            except Exception:
                logger.exception("Observer %r failed while handling %s", observer, event.type.name)


def log_observer(event: SessionEvent) -> None:
    """Write a one-line summary of each notification to the log."""
    session_id = getattr(event.session, "id", "?")
    who = event.player.name if event.player else "-"

    if event.type == SessionEventType.MOVE_REJECTED:
        logger.info("[%s] %s rejected: %s (%s)", session_id, who, event.move, event.data.get("error"))
    elif event.type == SessionEventType.MOVE_APPLIED:
        logger.info("[%s] %s played %s", session_id, who, event.move)
    elif event.type == SessionEventType.TURN_CHANGED:
        previous = event.data.get("previous")
        logger.debug("[%s] turn: %s -> %s", session_id,
                     previous.name if previous else "nobody", who)
    elif event.type == SessionEventType.GAME_FINISHED:
        result = f"{who} wins" if event.player else "draw"
        logger.info("[%s] game over: %s (%s)", session_id, result, event.data.get("reason"))
    elif event.type == SessionEventType.STATE_CHANGED:
        logger.info("[%s] state %s -> %s", session_id,
                    event.data.get("previous"), event.data.get("current"))
    else:
        logger.debug("[%s] %s %s", session_id, event.type.name, who)


class StatisticsObserver:
    """Aggregates play statistics across every session it observes."""

    def __init__(self):
        self.counters: Counter = Counter()
        self.moves_by_player: Counter = Counter()

    def __call__(self, event: SessionEvent) -> None:
        if event.type == SessionEventType.MOVE_APPLIED:
            self.counters["total_moves"] += 1
            if event.player is not None:
                self.moves_by_player[event.player.id] += 1
            if event.move is not None and event.move.is_placement:
                self.counters["placements"] += 1
            else:
                self.counters["translocations"] += 1
        elif event.type == SessionEventType.MOVE_REJECTED:
            self.counters["rejected_moves"] += 1
        elif event.type == SessionEventType.GAME_FINISHED:
            self.counters["games_finished"] += 1
            if event.player is not None:
                self.counters["wins"] += 1
            else:
                self.counters["draws"] += 1

    def snapshot(self) -> Dict[str, int]:
        return dict(self.counters)

    def reset(self) -> None:
        self.counters.clear()
        self.moves_by_player.clear()
