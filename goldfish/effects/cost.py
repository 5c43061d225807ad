"""Goldfish Engine - Cost Modification

Final spell costs from active cost-modification effects plus commander tax.

Cost effects only ever touch the generic component; colored pips are never
reduced. Commander tax (CR 903.8) is added after reductions and increases, so
cost reducers never eat into it.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from ..events import CostModifiedEvent
from ..mana import ManaCost
from .filters import spell_matches_cost_filter

CostLike = Union[str, ManaCost, None]

DEFAULT_TAX_PER_CAST = 2


@dataclass
class CostContribution:
    """One effect's share of a spell's cost change."""
    source: str
    reduction: int = 0
    increase: int = 0


@dataclass
class CostModifiers:
    """Aggregated cost modifiers for one spell."""
    generic_reduction: int = 0
    generic_increase: int = 0
    sources: List[CostContribution] = field(default_factory=list)

    @property
    def net_reduction(self) -> int:
        return self.generic_reduction - self.generic_increase

    @property
    def is_empty(self) -> bool:
        return not self.generic_reduction and not self.generic_increase


@dataclass
class CastCheck:
    """Result of ``can_cast_with_modified_cost``."""
    can_cast: bool
    base_cost: int
    modified_cost: int
    reduction: int
    increase: int
    modifiers: CostModifiers

    @property
    def savings(self) -> int:
        return self.base_cost - self.modified_cost


@dataclass
class CommanderCost:
    """Result of ``get_commander_final_cost``."""
    base_cost: int
    after_reduction: int
    commander_tax: int
    final_cost: int
    cost_string: str
    reduction: int
    increase: int


def _as_cost(cost: CostLike) -> ManaCost:
    return cost if isinstance(cost, ManaCost) else ManaCost.parse(cost)


def _tax_per_cast(state: Any) -> int:
    config = getattr(state, 'config', None)
    return getattr(config, 'commander_tax_per_cast', DEFAULT_TAX_PER_CAST)


# =============================================================================
# Modifiers
# =============================================================================

def get_cost_modifiers(state: Any, spell: Any) -> CostModifiers:
    """Sum every registered cost effect whose filter matches ``spell``."""
    modifiers = CostModifiers()
    registry = getattr(state, 'effect_registry', None)
    if spell is None or registry is None:
        return modifiers

    for effect in registry.get_cost_modification_effects():
        if not spell_matches_cost_filter(spell, effect.affected_filter):
            continue
        mod = effect.modification
        if mod.generic_reduction > 0:
            modifiers.generic_reduction += mod.generic_reduction
            modifiers.sources.append(CostContribution(effect.source_name,
                                                      reduction=mod.generic_reduction))
        if mod.generic_increase > 0:
            modifiers.generic_increase += mod.generic_increase
            modifiers.sources.append(CostContribution(effect.source_name,
                                                      increase=mod.generic_increase))
    return modifiers


def calculate_modified_cost(base_cost: CostLike, modifiers: Optional[CostModifiers]) -> str:
    """
    Apply ``reduction - increase`` to the generic component, floored at zero.

    Example:
        "{3}{U}{B}" with a {1} reduction -> "{2}{U}{B}"
    """
    cost = _as_cost(base_cost)
    if modifiers is None:
        return str(cost)
    return str(cost.with_generic(cost.generic - modifiers.net_reduction))


def get_modified_cmc(base_cost: CostLike, modifiers: Optional[CostModifiers]) -> int:
    return ManaCost.parse(calculate_modified_cost(base_cost, modifiers)).total


def apply_commander_tax(base_cost: CostLike, commander_cast_count: int,
                        tax_per_cast: int = DEFAULT_TAX_PER_CAST) -> str:
    """Add ``tax_per_cast`` generic per previous cast from the command zone."""
    if commander_cast_count < 0:
        raise ValueError(f"Commander cast count must be >= 0, got {commander_cast_count}")
    cost = _as_cost(base_cost)
    return str(cost.with_generic(cost.generic + commander_cast_count * tax_per_cast))


def get_commander_final_cost(state: Any, commander: Any) -> CommanderCost:
    """Base cost, then cost modifiers, then commander tax."""
    base = ManaCost.parse(getattr(commander, 'mana_cost', ''))
    modifiers = get_cost_modifiers(state, commander)
    modified = calculate_modified_cost(base, modifiers)

    cast_count = getattr(commander, 'commander_cast_count', 0) or 0
    per_cast = _tax_per_cast(state)
    final = apply_commander_tax(modified, cast_count, per_cast)

    return CommanderCost(
        base_cost=base.total,
        after_reduction=ManaCost.parse(modified).total,
        commander_tax=cast_count * per_cast,
        final_cost=ManaCost.parse(final).total,
        cost_string=final,
        reduction=modifiers.generic_reduction,
        increase=modifiers.generic_increase,
    )


def can_cast_with_modified_cost(state: Any, spell: Any) -> CastCheck:
    """
    Check a spell's modified cost against floating mana.

    Colored pips must be covered pip for pip and the pool total must cover
    the whole modified cost. The pool is only read.
    """
    base = ManaCost.parse(getattr(spell, 'mana_cost', ''))
    modifiers = get_cost_modifiers(state, spell)
    modified = ManaCost.parse(calculate_modified_cost(base, modifiers))

    pool = getattr(state, 'mana_pool', None)
    can_cast = pool.can_pay(modified) if pool is not None else modified.total == 0

    return CastCheck(
        can_cast=can_cast,
        base_cost=base.total,
        modified_cost=modified.total,
        reduction=modifiers.generic_reduction,
        increase=modifiers.generic_increase,
        modifiers=modifiers,
    )


# =============================================================================
# Reporting
# =============================================================================

def get_cost_display_info(state: Any, spell: Any, is_commander: bool = False) -> Dict[str, Any]:
    """Explanation of a spell's cost for UI rendering."""
    if is_commander:
        info = get_commander_final_cost(state, spell)
        parts = [f"Base: {info.base_cost}"]
        if info.reduction > 0:
            parts.append(f"-{info.reduction} (cost reducer)")
        if info.increase > 0:
            parts.append(f"+{info.increase} (cost increase)")
        if info.commander_tax > 0:
            parts.append(f"+{info.commander_tax} (commander tax)")
        parts.append(f"= {info.final_cost}")
        return {
            'display_string': ' '.join(parts),
            'final_cost': info.final_cost,
            'cost_string': info.cost_string,
            'has_modifications': bool(info.reduction or info.increase or info.commander_tax),
        }

    check = can_cast_with_modified_cost(state, spell)
    if check.modifiers.is_empty:
        return {
            'display_string': f"{check.base_cost} mana",
            'final_cost': check.base_cost,
            'cost_string': getattr(spell, 'mana_cost', ''),
            'has_modifications': False,
        }

    parts = [f"Base: {check.base_cost}"]
    if check.reduction > 0:
        parts.append(f"-{check.reduction} (cost reducer)")
    if check.increase > 0:
        parts.append(f"+{check.increase} (cost increase)")
    parts.append(f"= {check.modified_cost}")
    return {
        'display_string': ' '.join(parts),
        'final_cost': check.modified_cost,
        'cost_string': calculate_modified_cost(getattr(spell, 'mana_cost', ''), check.modifiers),
        'has_modifications': True,
    }


def log_cost_modifications(state: Any, spell: Any) -> Optional[CostModifiedEvent]:
    """Emit a ``CostModifiedEvent`` when any modifier applies to ``spell``."""
    modifiers = get_cost_modifiers(state, spell)
    if modifiers.is_empty:
        return None
    events = getattr(state, 'events', None)
    if events is None:
        return None

    base_cost = getattr(spell, 'mana_cost', '')
    return events.emit(CostModifiedEvent(
        source_name=getattr(spell, 'name', ''),
        base_cost=base_cost,
        modified_cost=calculate_modified_cost(base_cost, modifiers),
        reduction=modifiers.generic_reduction,
        increase=modifiers.generic_increase,
        contributors=tuple(c.source for c in modifiers.sources),
    ))


def get_cost_modification_ai_context(state: Any) -> Dict[str, Any]:
    registry = getattr(state, 'effect_registry', None)
    effects = registry.get_cost_modification_effects() if registry is not None else []
    if not effects:
        return {'has_cost_mods': False, 'summary': 'No cost modifiers active'}

    reductions = [
        {'source': e.source_name, 'types': list(e.affected_filter.spell_types),
         'reduction': e.modification.generic_reduction}
        for e in effects if e.modification.generic_reduction > 0
    ]
    increases = [
        {'source': e.source_name, 'types': list(e.affected_filter.spell_types),
         'increase': e.modification.generic_increase}
        for e in effects if e.modification.generic_increase > 0
    ]
    return {
        'has_cost_mods': True,
        'reduction_count': len(reductions),
        'increase_count': len(increases),
        'reductions': reductions,
        'increases': increases,
        'summary': f"{len(reductions)} cost reducer(s), {len(increases)} cost increaser(s)",
    }


def get_modified_costs_for_hand(state: Any) -> List[Dict[str, Any]]:
    """Modified cost and affordability for every nonland card in hand."""
    result = []
    for spell in getattr(state, 'hand', None) or []:
        if getattr(spell, 'category', '') == 'land':
            continue
        check = can_cast_with_modified_cost(state, spell)
        result.append({
            'name': spell.name,
            'category': spell.category,
            'base_cost': check.base_cost,
            'modified_cost': check.modified_cost,
            'can_afford': check.can_cast,
            'savings': check.savings,
            'has_reduction': check.reduction > 0,
            'has_increase': check.increase > 0,
        })
    return result


__all__ = [
    'CostContribution',
    'CostModifiers',
    'CastCheck',
    'CommanderCost',
    'get_cost_modifiers',
    'calculate_modified_cost',
    'get_modified_cmc',
    'apply_commander_tax',
    'get_commander_final_cost',
    'can_cast_with_modified_cost',
    'get_cost_display_info',
    'log_cost_modifications',
    'get_cost_modification_ai_context',
    'get_modified_costs_for_hand',
]
