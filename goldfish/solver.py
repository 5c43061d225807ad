"""Goldfish Engine - Potential Mana Solver

Solves whether a cost can be paid from abilities that have not been activated
yet, without tapping anything.

The solver is greedy and never backtracks:

1. Each colored pip, walking W, U, B, R, G and then C, claims the first
   unclaimed entry able to produce it.
2. Each point of generic claims the first remaining unclaimed entry.

It can reject payable costs where a flexible source gets used for an earlier
pip while a later pip needed it. Simulated statistics are compared against
this exact policy, so it is kept as is.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .events import EventLog, ManaSolvedEvent
from .mana import ManaCost
from .mana_abilities import (
    ManaAbility, ManaAbilityData, ManaProduction, PotentialManaEntry
)
from .types import COLORLESS, MANA_SYMBOLS

logger = logging.getLogger(__name__)


# Battlefield zones scanned for sources, paired with the entry's source kind.
SOURCE_ZONES = (
    ('lands', 'land'),
    ('artifacts', 'artifact'),
    ('creatures', 'creature'),
)


@dataclass
class ManaPayment:
    """One claimed entry and the symbol it will produce."""
    entry: PotentialManaEntry
    chosen_color: str
    reason: str

    @property
    def source_name(self) -> str:
        return self.entry.source_name

    @property
    def permanent(self) -> Any:
        return self.entry.permanent


@dataclass
class ManaSolution:
    """
    A payment plan for one cost.

    Attributes:
        payments: One payment per claimed entry, in claim order
        total_paid: Pips and generic covered, keyed by symbol and 'generic'
    """
    payments: List[ManaPayment] = field(default_factory=list)
    total_paid: Dict[str, int] = field(default_factory=dict)

    @property
    def sources_used(self) -> List[str]:
        return [p.source_name for p in self.payments]

    def __len__(self) -> int:
        return len(self.payments)


# =============================================================================
# Building the potential pool
# =============================================================================

def _manifest_entry(state: Any, name: str) -> Optional[ManaAbilityData]:
    manifest = getattr(state, 'behavior_manifest', None)
    abilities = getattr(manifest, 'mana_abilities', None) or {}
    data = abilities.get(name)
    if data is None or isinstance(data, ManaAbilityData):
        return data
    return ManaAbilityData.from_dict(data)


def build_potential_mana_pool(state: Any) -> List[PotentialManaEntry]:
    """
    Collect every mana ability that could be activated right now.

    Untapped lands, untapped artifacts and untapped creatures that are not
    summoning sick are scanned in that order. Each activatable ability of a
    permanent becomes one entry.

    Args:
        state: Game state exposing ``battlefield`` and ``behavior_manifest``

    Returns:
        Fresh list of entries; the caller discards it after solving
    """
    pool: List[PotentialManaEntry] = []
    battlefield = getattr(state, 'battlefield', None)
    if battlefield is None:
        return pool

    for zone, kind in SOURCE_ZONES:
        for permanent in getattr(battlefield, zone, None) or []:
            if getattr(permanent, 'tapped', False):
                continue
            if kind == 'creature' and getattr(permanent, 'summoning_sick', False):
                continue

            data = _manifest_entry(state, permanent.name)
            if data is None or not data.has_mana_ability:
                continue

            for index, ability in enumerate(data.abilities):
                if ability.can_activate(permanent):
                    pool.append(PotentialManaEntry(
                        source=kind,
                        source_name=permanent.name,
                        ability=ability,
                        permanent=permanent,
                        ability_index=index,
                    ))

    logger.debug("Found %d available mana abilities", len(pool))
    for index, entry in enumerate(pool):
        logger.debug("  %d: %s (%s) -> %s", index, entry.source_name, entry.source,
                     describe_production(entry.ability.produces))
    return pool


def describe_production(produces: Sequence[ManaProduction]) -> str:
    """Human readable summary of an ability's productions, e.g. '1x{W/U}'."""
    if not produces:
        return 'nothing'
    return ' + '.join(p.describe() for p in produces)


# =============================================================================
# Solving
# =============================================================================

def can_produce_color(ability: ManaAbility, color: str) -> bool:
    """True if any production can yield ``color`` (fixed, choice or combination)."""
    return color in ability.producible_symbols()


def choose_generic_color(ability: ManaAbility, state: Any = None) -> str:
    """Symbol to produce for generic: colorless if possible, else the first option."""
    symbols = [s for p in ability.produces for s in p.symbols()]
    if COLORLESS in symbols:
        return COLORLESS
    return symbols[0] if symbols else COLORLESS


def solve_cost(cost: Any, potential_pool: Sequence[PotentialManaEntry],
               state: Any = None,
               events: Optional[EventLog] = None) -> Optional[ManaSolution]:
    """
    Find entries to tap for ``cost``.

    Args:
        cost: ``ManaCost`` or cost string such as "{1}{G}"
        potential_pool: Entries from ``build_potential_mana_pool``
        state: Game state, unused by the greedy policy
        events: Sink for the ``ManaSolvedEvent``

    Returns:
        ManaSolution, or None when the greedy policy cannot pay the cost
    """
    if not isinstance(cost, ManaCost):
        cost = ManaCost.parse(cost)
    events = events if events is not None else getattr(state, 'events', None)
    cost_str = str(cost) or '{0}'

    payments: List[ManaPayment] = []
    claimed = set()

    def claim(index: int, color: str, reason: str) -> None:
        claimed.add(index)
        payments.append(ManaPayment(potential_pool[index], color, reason))

    for color in MANA_SYMBOLS:
        for _ in range(cost.pips[color]):
            index = next((i for i, entry in enumerate(potential_pool)
                          if i not in claimed and can_produce_color(entry.ability, color)),
                         None)
            if index is None:
                _report(events, cost_str, payments, failed_on=f'{{{color}}}')
                return None
            claim(index, color, f'colored requirement {{{color}}}')

    for remaining in range(cost.generic, 0, -1):
        index = next((i for i in range(len(potential_pool)) if i not in claimed), None)
        if index is None:
            _report(events, cost_str, payments, failed_on=f'generic {{{remaining}}}')
            return None
        claim(index, choose_generic_color(potential_pool[index].ability, state),
              'generic payment')

    total_paid = {symbol: cost.pips[symbol] for symbol in MANA_SYMBOLS}
    total_paid['generic'] = cost.generic
    solution = ManaSolution(payments=payments, total_paid=total_paid)
    _report(events, cost_str, payments)
    return solution


def _report(events: Optional[EventLog], cost_str: str,
            payments: List[ManaPayment], failed_on: str = '') -> None:
    if events is None:
        return
    events.emit(ManaSolvedEvent(cost=cost_str, success=not failed_on,
                                sources_used=tuple(p.source_name for p in payments),
                                failed_on=failed_on))


__all__ = [
    'SOURCE_ZONES',
    'ManaPayment',
    'ManaSolution',
    'build_potential_mana_pool',
    'describe_production',
    'can_produce_color',
    'choose_generic_color',
    'solve_cost',
]
