"""
Structured event records for the static-effects and mana subsystems.

Every observable step of the engine (effects registered or retracted, layers
applied, mana added, costs solved) is emitted as a typed record into an
``EventLog`` owned by the simulation. Tests and callers read the records
directly instead of scraping console output. Events are informational only:
nothing in the engine reads them back to make decisions.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Deque,
    Dict,
    List,
    Optional,
    Tuple,
    Type,
    TypeVar,
)

logger = logging.getLogger(__name__)

# Type variable for event types
E = TypeVar('E', bound='EngineEvent')


# =============================================================================
# Base Event Class
# =============================================================================

@dataclass
class EngineEvent:
    """
    Base class for all engine events.

    Attributes:
        sequence: Monotonically increasing counter assigned by the log on emit.
        source_name: Name of the card or permanent involved, if any.
    """
    sequence: int = 0
    source_name: str = ""

    level = logging.INFO

    def describe(self) -> str:
        """One-line human readable description of the event."""
        return self.__class__.__name__


# =============================================================================
# Static Effect Events
# =============================================================================

@dataclass
class EffectsRegisteredEvent(EngineEvent):
    """A permanent's static effects were added to the registry."""
    source_id: str = ""
    categories: Tuple[str, ...] = ()

    def describe(self) -> str:
        return (f"Registered {len(self.categories)} static effect(s) from "
                f"{self.source_name}: {', '.join(self.categories)}")


@dataclass
class EffectsUnregisteredEvent(EngineEvent):
    """A permanent's static effects were removed from the registry."""
    source_id: str = ""
    removed: int = 0

    def describe(self) -> str:
        return f"Removed {self.removed} static effect(s) from {self.source_name}"


@dataclass
class BattlefieldScannedEvent(EngineEvent):
    """The registry was rebuilt from the whole battlefield."""
    scanned: int = 0
    found: int = 0

    def describe(self) -> str:
        return (f"Battlefield scan complete: {self.scanned} permanents, "
                f"{self.found} effects found")


@dataclass
class LayersAppliedEvent(EngineEvent):
    """The layer engine recomputed every permanent's derived record."""
    type_changes: int = 0
    keyword_grants: int = 0
    pt_modifications: int = 0

    def describe(self) -> str:
        return (f"Layers applied: {self.type_changes} type change(s), "
                f"{self.keyword_grants} keyword grant(s), "
                f"{self.pt_modifications} P/T modification(s)")


# =============================================================================
# Mana Events
# =============================================================================

@dataclass
class ManaAddedEvent(EngineEvent):
    """Mana entered the floating pool."""
    kind: str = ""                 # 'fixed', 'choice', 'combination' or 'direct'
    produced: Tuple[str, ...] = ()
    amount: int = 0

    def describe(self) -> str:
        return (f"{self.source_name} added {self.amount} mana "
                f"({self.kind}: {''.join(self.produced) or '-'})")


@dataclass
class ManaPaidEvent(EngineEvent):
    """A cost was paid from the floating pool."""
    cost: str = ""
    shortfall: int = 0

    @property
    def level(self) -> int:
        return logging.ERROR if self.shortfall else logging.INFO

    def describe(self) -> str:
        if self.shortfall:
            return f"Failed to pay {self.cost}: short {self.shortfall} mana"
        return f"Paid {self.cost}"


@dataclass
class ColorChoiceEvent(EngineEvent):
    """A color (or combination) was picked for a flexible mana ability."""
    options: Tuple[str, ...] = ()
    chosen: Tuple[str, ...] = ()
    reason: str = ""

    def describe(self) -> str:
        return (f"Chose {''.join(self.chosen)} from {''.join(self.options)} "
                f"({self.reason})")


@dataclass
class ManaSolvedEvent(EngineEvent):
    """The potential-mana solver finished a cost."""
    cost: str = ""
    success: bool = False
    sources_used: Tuple[str, ...] = ()
    failed_on: str = ""

    def describe(self) -> str:
        if self.success:
            return (f"Solved {self.cost} using {len(self.sources_used)} source(s): "
                    f"{', '.join(self.sources_used)}")
        return f"Cannot solve {self.cost}: no source for {self.failed_on}"


# =============================================================================
# Cost Events
# =============================================================================

@dataclass
class CostModifiedEvent(EngineEvent):
    """Cost modifiers applied to a spell."""
    base_cost: str = ""
    modified_cost: str = ""
    reduction: int = 0
    increase: int = 0
    contributors: Tuple[str, ...] = ()

    def describe(self) -> str:
        if not self.reduction and not self.increase:
            return f"No cost modifications for {self.source_name}"
        return (f"{self.source_name}: {self.base_cost} -> {self.modified_cost} "
                f"(-{self.reduction}/+{self.increase} from {', '.join(self.contributors)})")


@dataclass
class EngineWarningEvent(EngineEvent):
    """A degraded path was taken (unknown rule, missing registry, ...)."""
    message: str = ""

    level = logging.WARNING

    def describe(self) -> str:
        return self.message


# =============================================================================
# Event Log
# =============================================================================

EventCallback = Callable[[EngineEvent], None]


class EventLog:
    """
    Injectable sink for engine events.

    Records are kept in a bounded history and forwarded to subscribers.
    Subscribing to a base class receives every subclass as well, so
    subscribing to ``EngineEvent`` observes everything.

    Thread Safety: This implementation is NOT thread-safe. Each simulated
    game owns its own log.
    """

    def __init__(self, record: bool = True, max_history: int = 1000,
                 verbose: bool = False) -> None:
        self._subscribers: Dict[Type[EngineEvent], List[EventCallback]] = {}
        self._history: Deque[EngineEvent] = deque(maxlen=max_history or None)
        self._record = record
        self._verbose = verbose
        self._next_sequence = 0

    @classmethod
    def from_config(cls, config: Any) -> 'EventLog':
        """Build a log from an ``EngineConfig``."""
        return cls(record=config.record_events,
                   max_history=config.max_event_history,
                   verbose=config.verbose)

    def subscribe(self, event_type: Type[E], callback: Callable[[E], None]) -> None:
        """
        Subscribe to events of a specific type.

        Args:
            event_type: The type of event to subscribe to.
            callback: Function to call when the event occurs.
        """
        callbacks = self._subscribers.setdefault(event_type, [])
        if callback not in callbacks:
            callbacks.append(callback)

    def unsubscribe(self, event_type: Type[E], callback: Callable[[E], None]) -> bool:
        """Remove a subscription. Returns True if it existed."""
        callbacks = self._subscribers.get(event_type, [])
        if callback in callbacks:
            callbacks.remove(callback)
            return True
        return False

    def emit(self, event: E) -> E:
        """
        Record an event and notify subscribers.

        Args:
            event: The event to emit.

        Returns:
            The same event, with its sequence number assigned.
        """
        event.sequence = self._next_sequence
        self._next_sequence += 1

        if self._record:
            self._history.append(event)

        level = event.level
        if level >= logging.WARNING:
            logger.log(level, event.describe())
        elif self._verbose:
            logger.info(event.describe())

        for event_type, callbacks in list(self._subscribers.items()):
            if not isinstance(event, event_type):
                continue
            for callback in list(callbacks):
                try:
                    callback(event)
                except Exception:
                    logger.exception("Error in event subscriber for %s",
                                     type(event).__name__)

        return event

    def warn(self, message: str, source_name: str = "") -> EngineWarningEvent:
        """Convenience wrapper emitting an ``EngineWarningEvent``."""
        return self.emit(EngineWarningEvent(source_name=source_name, message=message))

    @property
    def records(self) -> List[EngineEvent]:
        """Recorded events, oldest first."""
        return list(self._history)

    def of_type(self, event_type: Type[E]) -> List[E]:
        """Recorded events that are instances of ``event_type``."""
        return [e for e in self._history if isinstance(e, event_type)]

    def last(self, event_type: Optional[Type[E]] = None) -> Optional[EngineEvent]:
        """Most recent recorded event, optionally restricted to a type."""
        for event in reversed(self._history):
            if event_type is None or isinstance(event, event_type):
                return event
        return None

    def clear(self) -> None:
        """Drop the recorded history. Sequence numbers keep increasing."""
        self._history.clear()

    def __len__(self) -> int:
        return len(self._history)


__all__ = [
    'EngineEvent',
    'EffectsRegisteredEvent',
    'EffectsUnregisteredEvent',
    'BattlefieldScannedEvent',
    'LayersAppliedEvent',
    'ManaAddedEvent',
    'ManaPaidEvent',
    'ColorChoiceEvent',
    'ManaSolvedEvent',
    'CostModifiedEvent',
    'EngineWarningEvent',
    'EventLog',
]
