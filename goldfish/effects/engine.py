"""Goldfish Engine - Static Effects Coordinator

Ties detection, the registry and the layer engine to the game flow:

    permanent enters/leaves -> registry updated -> layers re-run

It also exposes the read-side views other systems consume: per-creature
combat data, stat breakdowns and a compact context summary for decision
makers.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..objects import MINUS_ONE_COUNTER, PLUS_ONE_COUNTER, FinalStats, parse_stat
from ..types import PERMANENT_ZONES
from .detector import has_static_ability
from .layers import apply_all_layers, calculate_final_stats, get_all_keywords
from .model import StaticEffect
from .registry import EffectRegistry

logger = logging.getLogger(__name__)

COMBAT_KEYWORDS = (
    ('has_flying', 'flying'),
    ('has_first_strike', 'first strike'),
    ('has_double_strike', 'double strike'),
    ('has_deathtouch', 'deathtouch'),
    ('has_lifelink', 'lifelink'),
    ('has_vigilance', 'vigilance'),
    ('has_trample', 'trample'),
    ('has_haste', 'haste'),
    ('has_defender', 'defender'),
)


def _warn(state: Any, message: str) -> None:
    events = getattr(state, 'events', None)
    if events is not None:
        events.warn(message)
    else:
        logger.warning(message)


# =============================================================================
# Lifecycle
# =============================================================================

def initialize_static_effects_system(state: Any) -> EffectRegistry:
    """Create the state's registry, scan the battlefield and apply layers once."""
    registry = EffectRegistry(events=getattr(state, 'events', None))
    state.effect_registry = registry
    registry.scan_battlefield(state)
    apply_all_layers(state, registry)
    return registry


def on_permanent_enters_battlefield(state: Any, permanent: Any) -> List[StaticEffect]:
    """
    Register a new permanent's effects and recompute the board.

    Layers are re-run even when the newcomer has no static ability, so it
    picks up effects already in play.

    Returns:
        Effects registered for the permanent
    """
    if state is None or permanent is None:
        return []
    registry = getattr(state, 'effect_registry', None)
    if registry is None:
        _warn(state, "Effect registry not initialized")
        return []

    effects: List[StaticEffect] = []
    if has_static_ability(permanent):
        effects = registry.register(permanent)
    apply_all_layers(state, registry)
    return effects


def on_permanent_leaves_battlefield(state: Any, permanent: Any) -> int:
    """Retract a departing permanent's effects. Returns how many were removed."""
    if state is None or permanent is None:
        return 0
    registry = getattr(state, 'effect_registry', None)
    if registry is None or not registry.has_effects(permanent):
        return 0

    removed = registry.unregister(permanent)
    apply_all_layers(state, registry)
    return removed


def update_static_effects(state: Any) -> None:
    """Full rescan and reapply; safe to call whenever the registry may be stale."""
    registry = getattr(state, 'effect_registry', None)
    if registry is None:
        return
    registry.scan_battlefield(state)
    apply_all_layers(state, registry)


# =============================================================================
# Creature views
# =============================================================================

def get_creature_stats(creature: Any) -> Dict[str, Any]:
    stats = calculate_final_stats(creature)
    return {
        'power': stats.power,
        'toughness': stats.toughness,
        'display_string': f"{stats.power}/{stats.toughness}",
    }


def get_creature_keywords(creature: Any) -> List[str]:
    return get_all_keywords(creature)


def creature_has_keyword(creature: Any, keyword: str) -> bool:
    return keyword.lower() in get_all_keywords(creature)


def get_combat_data(creature: Any) -> Dict[str, Any]:
    """Everything combat needs: final P/T, keyword flags, tapped and sick state."""
    stats = calculate_final_stats(creature)
    keywords = get_all_keywords(creature)
    data: Dict[str, Any] = {
        'name': getattr(creature, 'name', ''),
        'power': stats.power,
        'toughness': stats.toughness,
        'keywords': keywords,
    }
    for flag, keyword in COMBAT_KEYWORDS:
        data[flag] = keyword in keywords
    data['tapped'] = bool(getattr(creature, 'tapped', False))
    data['summoning_sick'] = bool(getattr(creature, 'summoning_sick', False))
    return data


@dataclass
class StatBreakdown:
    """How a creature's final stats were reached, tier by tier."""
    base: FinalStats
    counters: FinalStats
    static: FinalStats
    temporary: FinalStats
    final: FinalStats


def get_stat_breakdown(creature: Any) -> Optional[StatBreakdown]:
    if creature is None:
        return None

    counters = getattr(creature, 'counters', None) or {}
    delta = counters.get(PLUS_ONE_COUNTER, 0) - counters.get(MINUS_ONE_COUNTER, 0)

    record = getattr(creature, 'static_effects', None)
    static = FinalStats(0, 0)
    if record is not None:
        static = FinalStats(record.power_mod, record.toughness_mod)

    temporary = getattr(creature, 'temporary_modifications', None) or []
    temp = FinalStats(sum(m.power for m in temporary), sum(m.toughness for m in temporary))

    return StatBreakdown(
        base=FinalStats(parse_stat(getattr(creature, 'power', 0)),
                        parse_stat(getattr(creature, 'toughness', 0))),
        counters=FinalStats(delta, delta),
        static=static,
        temporary=temp,
        final=calculate_final_stats(creature),
    )


def _signed(stats: FinalStats) -> str:
    sign = '+' if stats.power >= 0 else ''
    return f"{sign}{stats.power}/{sign}{stats.toughness}"


def format_stat_breakdown(breakdown: Optional[StatBreakdown]) -> str:
    """e.g. 'Base: 2/2, Static: +1/+1, = 3/3'"""
    if breakdown is None:
        return ''
    parts = [f"Base: {breakdown.base.power}/{breakdown.base.toughness}"]
    for label, stats in (('Counters', breakdown.counters),
                         ('Static', breakdown.static),
                         ('Temp', breakdown.temporary)):
        if stats.power or stats.toughness:
            parts.append(f"{label}: {_signed(stats)}")
    parts.append(f"= {breakdown.final.power}/{breakdown.final.toughness}")
    return ', '.join(parts)


def get_all_creatures_with_stats(state: Any) -> List[Dict[str, Any]]:
    battlefield = getattr(state, 'battlefield', None)
    result = []
    for creature in getattr(battlefield, 'creatures', None) or []:
        stats = calculate_final_stats(creature)
        result.append({
            'name': creature.name,
            'base_power': parse_stat(creature.power),
            'base_toughness': parse_stat(creature.toughness),
            'final_power': stats.power,
            'final_toughness': stats.toughness,
            'keywords': get_all_keywords(creature),
            'tapped': bool(getattr(creature, 'tapped', False)),
            'summoning_sick': bool(getattr(creature, 'summoning_sick', False)),
        })
    return result


# =============================================================================
# Summaries and self-check
# =============================================================================

def get_active_effects_summary(state: Any) -> Dict[str, Any]:
    registry = getattr(state, 'effect_registry', None)
    if registry is None:
        return {'total_effects': 0, 'anthems': 0, 'keyword_grants': 0,
                'cost_mods': 0, 'summary': 'No static effects active'}
    return {
        'total_effects': registry.count(),
        'anthems': len(registry.get_anthem_effects()),
        'keyword_grants': len(registry.get_keyword_grant_effects()),
        'cost_mods': len(registry.get_cost_modification_effects()),
        'summary': registry.get_summary(),
    }


def validate_static_effects_system(state: Any) -> List[str]:
    """Return a list of consistency problems (empty when all is well)."""
    if state is None:
        return ['Game state is missing']

    issues = []
    registry = getattr(state, 'effect_registry', None)
    battlefield = getattr(state, 'battlefield', None)
    if registry is None:
        issues.append('Effect registry not initialized')
    if battlefield is None:
        issues.append('Battlefield not initialized')
        return issues

    if registry is not None:
        for zone in PERMANENT_ZONES:
            for permanent in getattr(battlefield, zone, None) or []:
                if has_static_ability(permanent) and not registry.has_effects(permanent):
                    issues.append(f"{permanent.name} has static ability but not registered")

    for creature in getattr(battlefield, 'creatures', None) or []:
        if getattr(creature, 'static_effects', None) is None:
            issues.append(f"{creature.name} missing static effects tracking")
    return issues


def fix_static_effects_issues(state: Any) -> None:
    """Create the registry if missing, then rescan and reapply."""
    if state is None:
        return
    if getattr(state, 'effect_registry', None) is None:
        initialize_static_effects_system(state)
    update_static_effects(state)


def get_ai_context(state: Any) -> Dict[str, Any]:
    """Compact description of active effects and the creatures they change."""
    if state is None or getattr(state, 'effect_registry', None) is None:
        return {'has_static_effects': False, 'summary': 'No static effects active'}

    summary = get_active_effects_summary(state)
    creatures = get_all_creatures_with_stats(state)
    boosted = [
        {'name': c['name'],
         'stats': f"{c['base_power']}/{c['base_toughness']} -> "
                  f"{c['final_power']}/{c['final_toughness']}"}
        for c in creatures
        if c['final_power'] != c['base_power'] or c['final_toughness'] != c['base_toughness']
    ]
    granted = [
        {'name': c.name, 'keywords': list(c.static_effects.keywords)}
        for c in state.battlefield.creatures
        if getattr(c, 'static_effects', None) is not None and c.static_effects.keywords
    ]
    return {
        'has_static_effects': summary['total_effects'] > 0,
        'summary': summary['summary'],
        'anthem_count': summary['anthems'],
        'keyword_grant_count': summary['keyword_grants'],
        'cost_mod_count': summary['cost_mods'],
        'boosted_creatures': boosted,
        'granted_keywords': granted,
    }


__all__ = [
    'initialize_static_effects_system',
    'on_permanent_enters_battlefield',
    'on_permanent_leaves_battlefield',
    'update_static_effects',
    'get_creature_stats',
    'get_creature_keywords',
    'creature_has_keyword',
    'get_combat_data',
    'StatBreakdown',
    'get_stat_breakdown',
    'format_stat_breakdown',
    'get_all_creatures_with_stats',
    'get_active_effects_summary',
    'validate_static_effects_system',
    'fix_static_effects_issues',
    'get_ai_context',
]
