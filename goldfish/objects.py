"""Goldfish Engine - Cards and Permanents

Cards arrive from deck-list parsing as flat records
(``name, type_line, mana_cost, cmc, power, toughness, oracle_text, category,
quantity``). A ``Permanent`` is a card on the simulated battlefield with
board state, counters and a derived ``static_effects`` record.

The derived record is a cache written by the layer engine. It is rebuilt
from scratch on every layer pass and is never the source of truth.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Union


PLUS_ONE_COUNTER = '+1/+1'
MINUS_ONE_COUNTER = '-1/-1'

_TYPE_LINE_SPLIT = re.compile(r'[\s—\-]+')


def parse_stat(value: Any) -> int:
    """Parse a printed power/toughness value. Non-numeric values ('*', '') are 0."""
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        match = re.match(r'^\s*([+-]?\d+)', str(value))
        return int(match.group(1)) if match else 0


def categorize_card(type_line: str) -> str:
    """Categorize a card from its type line (creature wins over artifact, etc.)."""
    if not type_line:
        return 'unknown'
    lower = type_line.lower()
    for category in ('creature', 'land', 'artifact', 'enchantment',
                     'planeswalker', 'instant', 'sorcery'):
        if category in lower:
            return category
    return 'unknown'


# =============================================================================
# Card
# =============================================================================

@dataclass(eq=False)
class Card:
    """
    A card as produced by deck-list parsing.

    Attributes:
        name: Card name
        type_line: Full type line, e.g. "Creature — Goblin Warrior"
        mana_cost: Mana cost string like "{2}{U}"
        cmc: Mana value
        power: Printed power (may be '*' or a string)
        toughness: Printed toughness
        oracle_text: Rules text
        category: Primary card type in lowercase ('creature', 'land', ...)
        types: Lowercase words of the type line (types and subtypes)
        keywords: Printed keywords when the card database provides them
        id: Stable instance id, assigned on registration when absent
    """
    name: str = ""
    type_line: str = ""
    mana_cost: str = ""
    cmc: int = 0
    power: Optional[Union[int, str]] = None
    toughness: Optional[Union[int, str]] = None
    oracle_text: str = ""
    category: str = ""
    quantity: int = 1
    types: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    is_commander: bool = False
    commander_cast_count: int = 0
    id: Optional[str] = None

    def __post_init__(self):
        if not self.category:
            self.category = categorize_card(self.type_line)
        if not self.types and self.type_line:
            self.types = [w for w in _TYPE_LINE_SPLIT.split(self.type_line.lower()) if w]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Card':
        """Build a card from a parsed deck-list record."""
        return cls(
            name=data.get('name') or "",
            type_line=data.get('type_line') or "",
            mana_cost=data.get('mana_cost') or "",
            cmc=int(data.get('cmc') or 0),
            power=data.get('power'),
            toughness=data.get('toughness'),
            oracle_text=data.get('oracle_text') or "",
            category=data.get('category') or "",
            quantity=int(data.get('quantity') or 1),
            keywords=list(data.get('keywords') or []),
            is_commander=bool(data.get('isCommander') or data.get('is_commander')),
            commander_cast_count=int(data.get('commander_cast_count') or 0),
        )

    @property
    def source_key(self) -> str:
        """Key used to look this object up in the effect registry."""
        return self.id or self.name

    # Type checking convenience methods
    def is_creature(self) -> bool:
        return self.category == 'creature' or 'creature' in self.types

    def is_land(self) -> bool:
        return self.category == 'land' or 'land' in self.types

    def is_artifact(self) -> bool:
        return self.category == 'artifact' or 'artifact' in self.types


# =============================================================================
# Derived state
# =============================================================================

@dataclass
class StaticEffectsRecord:
    """Layer-computed modifiers for one permanent."""
    power_mod: int = 0
    toughness_mod: int = 0
    keywords: List[str] = field(default_factory=list)
    type_mods: List[str] = field(default_factory=list)

    @property
    def has_mods(self) -> bool:
        return bool(self.power_mod or self.toughness_mod or self.keywords or self.type_mods)


@dataclass
class TemporaryModification:
    """A single-use P/T change granted by a spell (e.g. Giant Growth)."""
    power: int = 0
    toughness: int = 0
    source: str = ""


class FinalStats(NamedTuple):
    power: int
    toughness: int


# =============================================================================
# Permanent
# =============================================================================

@dataclass(eq=False)
class Permanent(Card):
    """
    A card on the battlefield.

    Attributes:
        tapped: Whether the permanent is tapped
        summoning_sick: Entered this turn and can't use {T} abilities yet
        counters: Named counter totals, e.g. {'+1/+1': 2}
        static_effects: Derived record written by the layer engine
        temporary_modifications: Until-end-of-turn P/T changes
    """
    tapped: bool = False
    summoning_sick: bool = False
    counters: Dict[str, int] = field(default_factory=dict)
    static_effects: Optional[StaticEffectsRecord] = None
    temporary_modifications: List[TemporaryModification] = field(default_factory=list)

    @classmethod
    def from_card(cls, card: Union[Card, Mapping[str, Any]],
                  summoning_sick: bool = False) -> 'Permanent':
        """Create a permanent from a card entering the battlefield."""
        if isinstance(card, Mapping):
            card = Card.from_dict(card)
        return cls(
            name=card.name,
            type_line=card.type_line,
            mana_cost=card.mana_cost,
            cmc=card.cmc,
            power=card.power,
            toughness=card.toughness,
            oracle_text=card.oracle_text,
            category=card.category,
            quantity=card.quantity,
            types=list(card.types),
            keywords=list(card.keywords),
            is_commander=card.is_commander,
            commander_cast_count=card.commander_cast_count,
            id=card.id,
            summoning_sick=summoning_sick,
        )

    def add_counters(self, counter_type: str, amount: int = 1) -> None:
        if amount < 0:
            raise ValueError(f"Counter amount must be >= 0, got {amount}")
        self.counters[counter_type] = self.counters.get(counter_type, 0) + amount

    def remove_counters(self, counter_type: str, amount: int = 1) -> int:
        """Remove up to ``amount`` counters; returns how many were removed."""
        current = self.counters.get(counter_type, 0)
        removed = min(current, amount)
        self.counters[counter_type] = current - removed
        return removed

    def add_temporary_modification(self, power: int, toughness: int, source: str = "") -> None:
        self.temporary_modifications.append(TemporaryModification(power, toughness, source))

    def clear_temporary_modifications(self) -> None:
        """Cleanup step: until-end-of-turn effects end."""
        self.temporary_modifications.clear()

    def tap(self) -> bool:
        if self.tapped:
            return False
        self.tapped = True
        return True

    def untap(self) -> None:
        self.tapped = False


__all__ = [
    'PLUS_ONE_COUNTER',
    'MINUS_ONE_COUNTER',
    'parse_stat',
    'categorize_card',
    'Card',
    'StaticEffectsRecord',
    'TemporaryModification',
    'FinalStats',
    'Permanent',
]
