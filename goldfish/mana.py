"""Goldfish Engine - Mana System

This module implements mana costs and the floating mana pool used by the
goldfish simulator.

The pool models the difference between *floating* mana (already produced
and sitting in the pool) and *potential* mana (untapped sources not yet
activated). Floating payment lives here; potential-source solving lives in
``goldfish.solver`` and is reached through ``ManaPool.solve_cost`` /
``ManaPool.can_pay``.

CR 106 - Mana
CR 107 - Numbers and Symbols
CR 903.8 - Commander tax
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import (
    Any, Callable, Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING
)

from .events import ColorChoiceEvent, EventLog, ManaAddedEvent, ManaPaidEvent
from .mana_abilities import ManaAbility, ManaChoice, ManaCombination, ManaProduction
from .objects import parse_stat
from .types import COLOR_ORDER, COLORLESS, MANA_SYMBOLS

if TYPE_CHECKING:
    from .solver import ManaSolution
    from .mana_abilities import PotentialManaEntry

logger = logging.getLogger(__name__)


# =============================================================================
# Mana Cost
# =============================================================================

_BRACE_PATTERN = re.compile(r'\{([^}]+)\}')
_PIP_PATTERN = re.compile(r'\{([WUBRGC])\}', re.IGNORECASE)


def _empty_pips() -> Dict[str, int]:
    return dict.fromkeys(MANA_SYMBOLS, 0)


@dataclass
class ManaCost:
    """A parsed mana cost: a generic component plus per-symbol pip counts.

    Examples:
        - "{2}{U}{U}" - generic 2, U 2 (Counterspell)
        - "{3}{U}{B}" - generic 3, U 1, B 1

    Hybrid and Phyrexian symbols are simplified to one generic each; X
    contributes nothing until a value is chosen.
    """
    generic: int = 0
    pips: Dict[str, int] = field(default_factory=_empty_pips)

    def __post_init__(self):
        if self.generic < 0:
            raise ValueError(f"Generic component must be >= 0, got {self.generic}")
        for symbol in MANA_SYMBOLS:
            self.pips.setdefault(symbol, 0)
        unknown = set(self.pips) - set(MANA_SYMBOLS)
        if unknown:
            raise ValueError(f"Unknown mana symbols in cost: {sorted(unknown)}")

    @classmethod
    def parse(cls, cost_str: Optional[str]) -> 'ManaCost':
        """Parse a cost string like "{3}{U}{B}". Empty or None is a zero cost."""
        cost = cls()
        if not cost_str:
            return cost

        for inner in _BRACE_PATTERN.findall(cost_str):
            inner = inner.strip().upper()
            if inner.isdigit():
                cost.generic += int(inner)
            elif inner in MANA_SYMBOLS:
                cost.pips[inner] += 1
            elif inner == 'X':
                continue
            else:
                # Hybrid / Phyrexian
                cost.generic += 1
        return cost

    @property
    def total(self) -> int:
        """Total mana required (mana value of the cost)."""
        return self.generic + sum(self.pips.values())

    @property
    def colored_total(self) -> int:
        return sum(self.pips.values())

    def with_generic(self, generic: int) -> 'ManaCost':
        """Copy of this cost with the generic component replaced (floored at 0)."""
        return ManaCost(generic=max(0, generic), pips=dict(self.pips))

    def to_string(self) -> str:
        return build_cost_string(self)

    def __getitem__(self, symbol: str) -> int:
        if symbol == 'generic':
            return self.generic
        return self.pips[symbol]

    def __str__(self) -> str:
        return build_cost_string(self)


def parse_mana(cost_str: Optional[str]) -> ManaCost:
    """Convenience function to parse a mana cost string."""
    return ManaCost.parse(cost_str)


def build_cost_string(cost: ManaCost) -> str:
    """Build a cost string: generic first, then pips in W U B R G C order.

    A zero cost builds to the empty string.
    """
    parts = []
    if cost.generic > 0:
        parts.append(f'{{{cost.generic}}}')
    for symbol in MANA_SYMBOLS:
        parts.extend(f'{{{symbol}}}' for _ in range(cost.pips.get(symbol, 0)))
    return ''.join(parts)


def count_pips(cost_str: Optional[str]) -> Dict[str, int]:
    """Count single-symbol pips in a cost string, case-insensitively."""
    needs = _empty_pips()
    for match in _PIP_PATTERN.findall(cost_str or ''):
        needs[match.upper()] += 1
    return needs


# =============================================================================
# Variable amounts (X rules)
# =============================================================================

def _creatures(state: Any) -> List[Any]:
    return list(getattr(state.battlefield, 'creatures', []) or [])


def _count_keyword(keyword: str) -> Callable[[Any, Any], int]:
    def resolve(state: Any, permanent: Any) -> int:
        return sum(1 for c in _creatures(state)
                   if keyword in (getattr(c, 'oracle_text', '') or '').lower())
    return resolve


def _power_of_this(state: Any, permanent: Any) -> int:
    return parse_stat(getattr(permanent, 'power', 0))


def _max_power(state: Any, permanent: Any) -> int:
    return max([0] + [parse_stat(getattr(c, 'power', 0)) for c in _creatures(state)])


def _sacrificed_mana_value(state: Any, permanent: Any) -> int:
    last = getattr(state, 'last_sacrificed', None)
    return int(getattr(last, 'cmc', 0) or 0) if last is not None else 0


def _count_zone(zone: str) -> Callable[[Any, Any], int]:
    def resolve(state: Any, permanent: Any) -> int:
        return len(getattr(state.battlefield, zone, []) or [])
    return resolve


# Checked in order; the first matching rule resolves the amount.
QUANTITY_RULES: Tuple[Tuple[Callable[[str], bool], Callable[[Any, Any], int]], ...] = (
    (lambda rule: rule == 'X=count(defenders)', _count_keyword('defender')),
    (lambda rule: rule == 'X=power(this)', _power_of_this),
    (lambda rule: rule == 'X=max_power(creatures)', _max_power),
    (lambda rule: 'sacrificedMV' in rule, _sacrificed_mana_value),
    (lambda rule: rule == 'X=count(artifacts)', _count_zone('artifacts')),
    (lambda rule: rule == 'X=count(creatures)', _count_zone('creatures')),
)


# =============================================================================
# Mana Pool
# =============================================================================

class ManaPool:
    """
    A player's floating mana.

    Six integer counters (WUBRG + colorless). ``actual_total`` is derived from
    the counters, so it always equals their sum.

    Attributes:
        pool: Counter per mana symbol.
        history: Additions since the pool was last emptied.
        events: Sink receiving mana events.
    """

    def __init__(self, events: Optional[EventLog] = None,
                 commander_need_weight: int = 3):
        self.pool: Dict[str, int] = _empty_pips()
        self.history: List[Dict[str, Any]] = []
        self.events = events if events is not None else EventLog()
        self.commander_need_weight = commander_need_weight

    # -------------------------------------------------------------------------
    # Counters
    # -------------------------------------------------------------------------

    @property
    def actual_total(self) -> int:
        return sum(self.pool.values())

    def get_amount(self, symbol: str) -> int:
        return self.pool.get(symbol, 0)

    def get_pool(self) -> Dict[str, int]:
        return dict(self.pool)

    def add(self, symbol: str, amount: int = 1, source_name: str = "") -> None:
        """Add ``amount`` mana of one symbol.

        Raises:
            ValueError: for an unknown symbol or a negative amount.
        """
        symbol = symbol.upper()
        if symbol not in MANA_SYMBOLS:
            raise ValueError(f"Unknown mana symbol: {symbol!r}")
        if amount < 0:
            raise ValueError(f"Mana amount must be >= 0, got {amount}")
        self.pool[symbol] += amount
        self.history.append({'source': source_name, 'type': 'direct',
                             'colors': [symbol] * amount, 'amount': amount})
        self.events.emit(ManaAddedEvent(source_name=source_name, kind='direct',
                                        produced=(symbol,) * amount, amount=amount))

    def empty(self) -> None:
        """Empty the pool (CR 106.4b: at the end of each step and phase)."""
        self.pool = _empty_pips()
        self.history = []

    # -------------------------------------------------------------------------
    # Producing mana
    # -------------------------------------------------------------------------

    def add_mana(self, production: ManaProduction, state: Any, permanent: Any) -> int:
        """Add mana from a parsed ability's production.

        Args:
            production: The production clause being resolved.
            state: Game state, for X rules and color heuristics.
            permanent: The permanent producing mana.

        Returns:
            The amount of mana added.
        """
        name = getattr(permanent, 'name', '')
        quantity = production.quantity
        if isinstance(quantity, str) and quantity.startswith('X='):
            amount = self.resolve_quantity(quantity, state, permanent)
        else:
            amount = int(quantity)

        types = production.types
        if not types:
            self.events.warn(f"No mana types specified for {name}", source_name=name)
            return 0

        first = types[0]
        if isinstance(first, ManaChoice):
            color = self.choose_optimal_color(list(first.options), state, permanent)
            self.pool[color] += amount
            self.history.append({'source': name, 'type': 'choice', 'chosen': color,
                                 'amount': amount, 'options': list(first.options)})
            self.events.emit(ManaAddedEvent(source_name=name, kind='choice',
                                            produced=(color,) * amount, amount=amount))
            return amount

        if isinstance(first, ManaCombination):
            combo = self.choose_optimal_combination(list(first.options), amount, state)
            for color in combo:
                self.pool[color] += 1
            self.history.append({'source': name, 'type': 'combination',
                                 'chosen': combo, 'amount': amount})
            self.events.emit(ManaAddedEvent(source_name=name, kind='combination',
                                            produced=tuple(combo), amount=amount))
            return amount

        fixed = [t for t in types if isinstance(t, str) and t in MANA_SYMBOLS]
        if len(fixed) == 1:
            produced = fixed * amount
        else:
            produced = fixed
        for color in produced:
            self.pool[color] += 1
        self.history.append({'source': name, 'type': 'fixed',
                             'colors': produced, 'amount': len(produced)})
        self.events.emit(ManaAddedEvent(source_name=name, kind='fixed',
                                        produced=tuple(produced), amount=len(produced)))
        return len(produced)

    def resolve_quantity(self, rule: str, state: Any, permanent: Any) -> int:
        """Resolve a variable amount rule such as ``X=power(this)``.

        Unknown rules default to 1 and emit a warning.
        """
        for matches, resolve in QUANTITY_RULES:
            if matches(rule):
                return resolve(state, permanent)
        self.events.warn(f"Unknown X rule: {rule}, defaulting to 1",
                         source_name=getattr(permanent, 'name', ''))
        return 1

    # -------------------------------------------------------------------------
    # Color heuristics
    # -------------------------------------------------------------------------

    def analyze_hand_color_needs(self, hand: Optional[Sequence[Any]],
                                 state: Any) -> Dict[str, int]:
        """Count colored pips of uncast spells in hand.

        Each pip of the commander's cost counts ``commander_need_weight``
        times while the commander waits in the command zone.
        """
        needs = _empty_pips()
        for card in hand or []:
            if getattr(card, 'category', '') == 'land':
                continue
            for symbol, count in count_pips(getattr(card, 'mana_cost', '')).items():
                needs[symbol] += count

        command_zone = getattr(state, 'command_zone', None) or []
        if command_zone:
            commander = command_zone[0]
            for symbol, count in count_pips(getattr(commander, 'mana_cost', '')).items():
                needs[symbol] += count * self.commander_need_weight
        return needs

    def choose_optimal_color(self, colors: List[str], state: Any, permanent: Any) -> str:
        """Pick the color a choice ability should produce.

        The offered color the hand needs most wins (ties keep offer order).
        With no need in hand, the deck's primary colors decide, then the
        first option.
        """
        if 'commander' in (getattr(permanent, 'oracle_text', '') or '').lower():
            return self.choose_from_commander_identity(colors, state)

        needs = self.analyze_hand_color_needs(getattr(state, 'hand', None), state)
        best, best_need = None, 0
        for color in colors:
            if needs.get(color, 0) > best_need:
                best, best_need = color, needs[color]
        if best is not None:
            return self._chosen(colors, best, 'hand needs it', permanent)

        for color in getattr(state, 'strategy_colors', None) or []:
            if color in colors:
                return self._chosen(colors, color, 'deck primary color', permanent)

        return self._chosen(colors, colors[0], 'default', permanent)

    def choose_from_commander_identity(self, colors: List[str], state: Any) -> str:
        """Restrict a choice to the commander's colors (Command Tower, Arcane Signet)."""
        commander = self._find_commander(state)
        cost = getattr(commander, 'mana_cost', '') if commander is not None else ''
        if not cost:
            return colors[0]

        identity = [c for c in COLOR_ORDER if f'{{{c}}}' in cost]
        valid = [c for c in colors if c in identity]
        if not valid:
            return colors[0]

        needs = self.analyze_hand_color_needs(getattr(state, 'hand', None), state)
        for color in valid:
            if needs[color] > 0:
                return color
        return valid[0]

    def choose_optimal_combination(self, colors: List[str], amount: int,
                                   state: Any) -> List[str]:
        """Fill ``amount`` mana greedily with the most-needed colors, cycling."""
        if not colors:
            return []
        needs = self.analyze_hand_color_needs(getattr(state, 'hand', None), state)
        ranked = sorted(colors, key=lambda c: -needs.get(c, 0))
        combo = [ranked[i % len(ranked)] for i in range(amount)]
        self.events.emit(ColorChoiceEvent(options=tuple(colors), chosen=tuple(combo),
                                          reason='combination by hand need'))
        return combo

    def choose_best_ability(self, abilities: List[ManaAbility], state: Any,
                            permanent: Any) -> Optional[ManaAbility]:
        """Choose between several mana abilities of one permanent.

        An ability producing the hand's most needed color scores 100. Otherwise
        flexibility decides: choice 30, colored 20, colorless 10.
        """
        if not abilities:
            return None
        if len(abilities) == 1:
            return abilities[0]

        needs = self.analyze_hand_color_needs(getattr(state, 'hand', None), state)
        scored = []
        for ability in abilities:
            can_produce = [s for s in ability.producible_symbols() if s in MANA_SYMBOLS]
            highest = max([needs[c] for c in can_produce] + [0])
            if highest > 0:
                score = 100
            elif any(isinstance(t, ManaChoice) for p in ability.produces for t in p.types):
                score = 30
            elif any(c != COLORLESS for c in can_produce):
                score = 20
            elif COLORLESS in can_produce:
                score = 10
            else:
                score = 5
            scored.append((score, ability))

        # Stable: equal scores keep listing order
        scored.sort(key=lambda pair: -pair[0])
        return scored[0][1]

    def _find_commander(self, state: Any) -> Any:
        command_zone = getattr(state, 'command_zone', None) or []
        if command_zone:
            return command_zone[0]
        for creature in _creatures(state):
            if getattr(creature, 'is_commander', False):
                return creature
        return None

    def _chosen(self, options: List[str], color: str, reason: str, permanent: Any) -> str:
        self.events.emit(ColorChoiceEvent(source_name=getattr(permanent, 'name', ''),
                                          options=tuple(options), chosen=(color,),
                                          reason=reason))
        return color

    # -------------------------------------------------------------------------
    # Paying
    # -------------------------------------------------------------------------

    def can_pay(self, cost: Any,
                potential_pool: Optional[Sequence['PotentialManaEntry']] = None,
                state: Any = None) -> bool:
        """Check whether a cost is payable.

        With ``potential_pool`` the solver decides against untapped sources;
        otherwise floating mana is checked pip for pip and in total.
        """
        cost = cost if isinstance(cost, ManaCost) else ManaCost.parse(cost)
        if potential_pool is not None:
            return self.solve_cost(cost, potential_pool, state) is not None

        for symbol in MANA_SYMBOLS:
            if self.pool[symbol] < cost.pips[symbol]:
                return False
        return self.actual_total >= cost.total

    def pay(self, cost: Any) -> bool:
        """Pay a cost from floating mana.

        Colored pips come out of their own counters. The generic remainder is
        paid from colorless first, then W, U, B, R, G. A shortfall is logged
        and leaves the pool partially paid; callers should have checked
        ``can_pay`` first.

        Returns:
            True if the cost was paid in full.
        """
        cost = cost if isinstance(cost, ManaCost) else ManaCost.parse(cost)
        shortfall = 0

        for symbol in MANA_SYMBOLS:
            required = cost.pips[symbol]
            used = min(self.pool[symbol], required)
            self.pool[symbol] -= used
            shortfall += required - used

        remaining = cost.generic
        for symbol in (COLORLESS,) + COLOR_ORDER:
            if remaining <= 0:
                break
            used = min(self.pool[symbol], remaining)
            self.pool[symbol] -= used
            remaining -= used
        shortfall += remaining

        self.events.emit(ManaPaidEvent(cost=str(cost) or '{0}', shortfall=shortfall))
        return shortfall == 0

    def solve_cost(self, cost: Any, potential_pool: Sequence['PotentialManaEntry'],
                   state: Any = None) -> Optional['ManaSolution']:
        """Find sources to tap for ``cost`` without tapping anything."""
        from .solver import solve_cost
        return solve_cost(cost, potential_pool, state, events=self.events)

    def __str__(self) -> str:
        colors = ' '.join(f'{s}:{n}' for s, n in self.pool.items() if n > 0)
        return f"Total: {self.actual_total} ({colors or 'none'})"

    def __repr__(self) -> str:
        return f"ManaPool({self.get_pool()})"

    def __len__(self) -> int:
        return self.actual_total

    def __bool__(self) -> bool:
        return self.actual_total > 0


__all__ = [
    'ManaCost',
    'parse_mana',
    'build_cost_string',
    'count_pips',
    'QUANTITY_RULES',
    'ManaPool',
]
