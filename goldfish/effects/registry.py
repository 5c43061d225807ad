"""Goldfish Engine - Effect Registry

Stores every active static effect, indexed by the source permanent's id and
kept in one flat list in registration order.

Invariant: the flat list holds exactly the union of the per-source lists.
Removal works by effect identity, so unregistering one source never takes
effects belonging to another.
"""
import itertools
import logging
from typing import Any, Callable, Dict, List, Optional

from ..events import (
    BattlefieldScannedEvent,
    EffectsRegisteredEvent,
    EffectsUnregisteredEvent,
    EventLog,
)
from ..types import PERMANENT_ZONES, EffectCategory, Layer, SourceId, Timestamp
from .detector import detect_all_static_effects, format_effect_description
from .model import StaticEffect

logger = logging.getLogger(__name__)

# Shared by every registry so ids stay unique when a registry is rebuilt.
_source_ids = itertools.count(1)


class EffectRegistry:
    """
    Indexed store of active static effects.

    Attributes:
        effects_by_source: source id -> that source's effects
        all_effects: Every active effect, oldest registration first
        events: Sink for register/unregister/scan events
    """

    def __init__(self, events: Optional[EventLog] = None,
                 clock: Optional[Callable[[], Timestamp]] = None):
        self.effects_by_source: Dict[SourceId, List[StaticEffect]] = {}
        self.all_effects: List[StaticEffect] = []
        self.events = events if events is not None else EventLog()
        # Monotonic per-registry creation order used as the layer tie-break
        self._clock = clock or itertools.count(1).__next__
        self._total_registered = 0
        self._total_removed = 0

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def _source_id(self, permanent: Any, assign: bool = False) -> SourceId:
        source_id = getattr(permanent, 'id', None)
        if source_id:
            return source_id
        name = getattr(permanent, 'name', '') or 'permanent'
        if not assign:
            return name
        source_id = f"{name}_{next(_source_ids)}"
        if permanent is not None:
            permanent.id = source_id
        return source_id

    def register(self, permanent: Any) -> List[StaticEffect]:
        """
        Detect and store a permanent's static effects.

        Assigns ``permanent.id`` when it has none. Registering a source that
        is already registered replaces its previous effects.

        Returns:
            The stored effects (empty if nothing was detected)
        """
        if permanent is None:
            return []

        effects = detect_all_static_effects(permanent, clock=self._clock)
        if not effects:
            return []

        source_id = self._source_id(permanent, assign=True)
        if source_id in self.effects_by_source:
            self._remove_source(source_id)

        bound = [e.with_source(permanent, source_id) for e in effects]
        self._store(source_id, bound)

        self.events.emit(EffectsRegisteredEvent(
            source_name=getattr(permanent, 'name', ''),
            source_id=source_id,
            categories=tuple(e.category.value for e in bound),
        ))
        return bound

    def add_effect(self, effect: StaticEffect) -> StaticEffect:
        """
        Store a pre-built effect under its ``source_id``.

        Used for effects without a text detector (type changes). An effect
        without a timestamp is stamped by the registry clock.
        """
        if not effect.timestamp:
            effect = StaticEffect(effect.category, effect.layer, effect.affected_filter,
                                  effect.modification, effect.source, effect.source_id,
                                  self._clock())
        source_id = effect.source_id or self._source_id(effect.source, assign=True)
        if source_id != effect.source_id:
            effect = effect.with_source(effect.source, source_id)
        self._store(source_id, [effect])
        self.events.emit(EffectsRegisteredEvent(
            source_name=effect.source_name, source_id=source_id,
            categories=(effect.category.value,),
        ))
        return effect

    def _store(self, source_id: SourceId, effects: List[StaticEffect]) -> None:
        self.effects_by_source.setdefault(source_id, []).extend(effects)
        self.all_effects.extend(effects)
        self._total_registered += len(effects)

    def unregister(self, permanent: Any) -> int:
        """
        Remove every effect a permanent registered.

        A permanent that was never registered is a no-op.

        Returns:
            Number of effects removed
        """
        if permanent is None:
            return 0
        source_id = self._source_id(permanent)
        if source_id not in self.effects_by_source:
            return 0
        removed = self._remove_source(source_id)
        self.events.emit(EffectsUnregisteredEvent(
            source_name=getattr(permanent, 'name', ''),
            source_id=source_id,
            removed=removed,
        ))
        return removed

    def _remove_source(self, source_id: SourceId) -> int:
        effects = self.effects_by_source.pop(source_id, [])
        doomed = {id(e) for e in effects}
        self.all_effects = [e for e in self.all_effects if id(e) not in doomed]
        self._total_removed += len(effects)
        return len(effects)

    def scan_battlefield(self, state: Any) -> int:
        """
        Rebuild the registry from every permanent zone except lands.

        This is the recovery path whenever the registry may be out of sync
        with the board.

        Returns:
            Number of effects found
        """
        self.clear()
        battlefield = getattr(state, 'battlefield', None)
        scanned = found = 0
        for zone in PERMANENT_ZONES:
            for permanent in getattr(battlefield, zone, None) or []:
                scanned += 1
                found += len(self.register(permanent))

        self.events.emit(BattlefieldScannedEvent(scanned=scanned, found=found))
        return found

    def clear(self) -> None:
        self.effects_by_source.clear()
        self.all_effects = []

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_effects_by_category(self, category: EffectCategory) -> List[StaticEffect]:
        return [e for e in self.all_effects if e.category is category]

    def get_effects_by_layer(self, layer: Optional[Layer]) -> List[StaticEffect]:
        return [e for e in self.all_effects if e.layer is layer]

    def get_cost_modification_effects(self) -> List[StaticEffect]:
        return self.get_effects_by_category(EffectCategory.COST_MODIFICATION)

    def get_anthem_effects(self) -> List[StaticEffect]:
        return self.get_effects_by_category(EffectCategory.POWER_TOUGHNESS)

    def get_keyword_grant_effects(self) -> List[StaticEffect]:
        return self.get_effects_by_category(EffectCategory.KEYWORD_GRANT)

    def has_effects(self, permanent: Any) -> bool:
        if permanent is None:
            return False
        return self._source_id(permanent) in self.effects_by_source

    def get_effects_from_source(self, permanent: Any) -> List[StaticEffect]:
        if permanent is None:
            return []
        return list(self.effects_by_source.get(self._source_id(permanent), []))

    def count(self) -> int:
        return len(self.all_effects)

    def is_empty(self) -> bool:
        return not self.all_effects

    def __len__(self) -> int:
        return len(self.all_effects)

    def __contains__(self, permanent: Any) -> bool:
        return self.has_effects(permanent)

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def get_effect_breakdown(self) -> Dict[str, int]:
        return {c.value: len(self.get_effects_by_category(c)) for c in EffectCategory}

    def get_layer_breakdown(self) -> Dict[Any, int]:
        breakdown: Dict[Any, int] = {l.value: len(self.get_effects_by_layer(l)) for l in Layer}
        breakdown['cost_mods'] = len(self.get_cost_modification_effects())
        return breakdown

    def get_stats(self) -> Dict[str, Any]:
        return {
            'total_effects_registered': self._total_registered,
            'total_effects_removed': self._total_removed,
            'current_active_effects': self.count(),
            'effects_by_category': self.get_effect_breakdown(),
            'effects_by_layer': self.get_layer_breakdown(),
        }

    def get_summary(self) -> str:
        """One line, e.g. '2 active effect(s): 1 anthem(s), 1 keyword grant(s)'."""
        if self.is_empty():
            return 'No static effects active'

        parts = []
        for label, effects in (('anthem(s)', self.get_anthem_effects()),
                               ('keyword grant(s)', self.get_keyword_grant_effects()),
                               ('cost modification(s)', self.get_cost_modification_effects())):
            if effects:
                parts.append(f"{len(effects)} {label}")
        return f"{self.count()} active effect(s): {', '.join(parts)}"

    def describe(self) -> str:
        """Multi-line registry details for debugging."""
        lines = ["=== Effect Registry Details ===", f"Total effects: {self.count()}"]
        if self.is_empty():
            lines.append("Registry is empty")
            return '\n'.join(lines)

        lines.append("By Category:")
        lines.extend(f"  {c}: {n}" for c, n in self.get_effect_breakdown().items() if n)
        lines.append("By Layer:")
        lines.extend(f"  Layer {l}: {n}" for l, n in self.get_layer_breakdown().items() if n)
        lines.append("By Source:")
        for source_id, effects in self.effects_by_source.items():
            lines.append(f"  {source_id}: {len(effects)} effect(s)")
            lines.extend(f"    - {format_effect_description(e)}" for e in effects)
        stats = self.get_stats()
        lines.append(f"Total registered: {stats['total_effects_registered']}")
        lines.append(f"Total removed: {stats['total_effects_removed']}")
        return '\n'.join(lines)

    def __repr__(self) -> str:
        return f"EffectRegistry({self.get_summary()})"


def create_registry_for_game(state: Any) -> EffectRegistry:
    """New registry sharing the state's event log, populated from its battlefield."""
    registry = EffectRegistry(events=getattr(state, 'events', None))
    registry.scan_battlefield(state)
    return registry


__all__ = ['EffectRegistry', 'create_registry_for_game']
