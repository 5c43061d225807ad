"""Goldfish Engine - Layer Engine (CR 613, simplified)

Recomputes every permanent's derived ``static_effects`` record from the
registry. Three layers are modelled, applied strictly in order:

- Layer 4 (CR 613.1d): type-changing effects
- Layer 6 (CR 613.1f): ability-adding effects (keyword grants)
- Layer 7c (CR 613.4c): +N/+N and -N/-N modifications

Within a layer effects apply oldest timestamp first (CR 613.7). Records are
rebuilt from zero on every pass, so applying the layers twice in a row gives
the same result.
"""
import logging
from typing import Any, Dict, List, Optional

from ..events import LayersAppliedEvent
from ..objects import (
    MINUS_ONE_COUNTER, PLUS_ONE_COUNTER, FinalStats, StaticEffectsRecord, parse_stat
)
from ..types import CATEGORY_ZONES, KEYWORDS, PERMANENT_ZONES, Layer, get_all_layers_in_order
from .filters import permanent_matches_filter
from .model import KeywordGrant, PowerToughnessMod, StaticEffect, TypeChange

logger = logging.getLogger(__name__)


def apply_all_layers(state: Any, registry: Any) -> None:
    """
    Recompute derived records for the whole battlefield.

    Args:
        state: Game state exposing ``battlefield``
        registry: ``EffectRegistry`` holding the active effects
    """
    if state is None or registry is None:
        return

    _reset_calculated_values(state)

    applied: Dict[Layer, int] = {}
    for layer in get_all_layers_in_order():
        effects = sorted(registry.get_effects_by_layer(layer), key=lambda e: e.timestamp)
        for effect in effects:
            _apply_effect(state, effect)
        applied[layer] = len(effects)

    events = getattr(state, 'events', None)
    if events is None:
        events = getattr(registry, 'events', None)
    if events is not None:
        events.emit(LayersAppliedEvent(
            type_changes=applied[Layer.LAYER_4_TYPE],
            keyword_grants=applied[Layer.LAYER_6_ABILITY],
            pt_modifications=applied[Layer.LAYER_7C_MODIFY_PT],
        ))


def _reset_calculated_values(state: Any) -> None:
    battlefield = state.battlefield
    for zone in PERMANENT_ZONES:
        for permanent in getattr(battlefield, zone, None) or []:
            permanent.static_effects = StaticEffectsRecord()


def _record(permanent: Any) -> StaticEffectsRecord:
    if getattr(permanent, 'static_effects', None) is None:
        permanent.static_effects = StaticEffectsRecord()
    return permanent.static_effects


def _apply_effect(state: Any, effect: StaticEffect) -> None:
    mod = effect.modification
    targets = find_matching_permanents(state, effect)

    if isinstance(mod, TypeChange):
        for permanent in targets:
            record = _record(permanent)
            for type_name in mod.types:
                if type_name not in record.type_mods:
                    record.type_mods.append(type_name)
    elif isinstance(mod, KeywordGrant):
        for permanent in targets:
            record = _record(permanent)
            if mod.keyword not in record.keywords:
                record.keywords.append(mod.keyword)
    elif isinstance(mod, PowerToughnessMod):
        for permanent in targets:
            record = _record(permanent)
            record.power_mod += mod.power
            record.toughness_mod += mod.toughness
    else:
        logger.warning("No layer handler for %s effect from %s",
                       effect.category.value, effect.source_name)


def find_matching_permanents(state: Any, effect: StaticEffect) -> List[Any]:
    """Permanents in the zones named by the filter's card types that match it."""
    affected_filter = effect.affected_filter
    zones = [CATEGORY_ZONES[t] for t in affected_filter.card_types
             if CATEGORY_ZONES.get(t) in PERMANENT_ZONES]
    if not zones:
        zones = list(PERMANENT_ZONES)

    matches = []
    for zone in zones:
        for permanent in getattr(state.battlefield, zone, None) or []:
            if permanent_matches_filter(permanent, affected_filter, effect.source):
                matches.append(permanent)
    return matches


# =============================================================================
# Final characteristics
# =============================================================================

def calculate_final_stats(creature: Any) -> FinalStats:
    """
    Final power/toughness: base, then counters, then static, then temporary.

    Each total is clamped at zero.
    """
    if creature is None:
        return FinalStats(0, 0)

    power = parse_stat(getattr(creature, 'power', 0))
    toughness = parse_stat(getattr(creature, 'toughness', 0))

    counters = getattr(creature, 'counters', None) or {}
    delta = counters.get(PLUS_ONE_COUNTER, 0) - counters.get(MINUS_ONE_COUNTER, 0)
    power += delta
    toughness += delta

    record = getattr(creature, 'static_effects', None)
    if record is not None:
        power += record.power_mod
        toughness += record.toughness_mod

    for mod in getattr(creature, 'temporary_modifications', None) or []:
        power += mod.power
        toughness += mod.toughness

    return FinalStats(max(0, power), max(0, toughness))


def get_all_keywords(creature: Any) -> List[str]:
    """Printed keywords (rules text and card data) plus granted keywords."""
    if creature is None:
        return []

    keywords: List[str] = []
    text = (getattr(creature, 'oracle_text', '') or '').lower()
    for keyword in KEYWORDS:
        if keyword in text and keyword not in keywords:
            keywords.append(keyword)

    for keyword in getattr(creature, 'keywords', None) or []:
        keyword = keyword.lower()
        if keyword not in keywords:
            keywords.append(keyword)

    record = getattr(creature, 'static_effects', None)
    if record is not None:
        for keyword in record.keywords:
            if keyword not in keywords:
                keywords.append(keyword)
    return keywords


def get_static_effects_summary(permanent: Any) -> Dict[str, Any]:
    record: Optional[StaticEffectsRecord] = getattr(permanent, 'static_effects', None)
    if record is None:
        return {'has_mods': False, 'power_mod': 0, 'toughness_mod': 0,
                'keywords': [], 'type_mods': []}
    return {
        'has_mods': True,
        'power_mod': record.power_mod,
        'toughness_mod': record.toughness_mod,
        'keywords': list(record.keywords),
        'type_mods': list(record.type_mods),
    }


def recalculate_static_effects(state: Any) -> bool:
    """Re-run the layers with the state's own registry. Returns False without one."""
    registry = getattr(state, 'effect_registry', None)
    if registry is None:
        events = getattr(state, 'events', None)
        if events is not None:
            events.warn("No effect registry found on game state")
        else:
            logger.warning("No effect registry found on game state")
        return False
    apply_all_layers(state, registry)
    return True


__all__ = [
    'apply_all_layers',
    'find_matching_permanents',
    'calculate_final_stats',
    'get_all_keywords',
    'get_static_effects_summary',
    'recalculate_static_effects',
]
