"""Goldfish Engine - Mana Ability Metadata

Oracle-text parsing of mana abilities happens upstream; the engine consumes
the already-parsed structure found in ``behaviorManifest.manaAbilities``.
A production's ``types`` list holds, per entry, one of:

- a fixed mana symbol: ``'G'``
- a player choice among symbols: ``{'choice': ['W', 'U']}``
- a combination of ``quantity`` symbols drawn from a set:
  ``{'combination': ['R', 'G'], 'total': 'X'}``

``quantity`` is an int or a variable-amount rule string such as
``'X=power(this)'``.
"""
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Tuple, Union

# =============================================================================
# Production types
# =============================================================================

@dataclass(frozen=True)
class ManaChoice:
    """The controller picks one symbol from ``options``."""
    options: Tuple[str, ...]

@dataclass(frozen=True)
class ManaCombination:
    """``quantity`` mana in any combination of ``options``."""
    options: Tuple[str, ...]

ProductionType = Union[str, ManaChoice, ManaCombination]

def _parse_production_type(raw: Any) -> Optional[ProductionType]:
    if isinstance(raw, (ManaChoice, ManaCombination)):
        return raw
    if isinstance(raw, str):
        return raw.upper()
    if isinstance(raw, Mapping):
        if raw.get('choice'):
            return ManaChoice(tuple(str(c).upper() for c in raw['choice']))
        if raw.get('combination'):
            return ManaCombination(tuple(str(c).upper() for c in raw['combination']))
    return None

@dataclass
class ManaProduction:
    """One 'Add ...' clause of a mana ability."""
    quantity: Union[int, str] = 1
    types: List[ProductionType] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ManaProduction':
        types = []
        for raw in data.get('types') or []:
            parsed = _parse_production_type(raw)
            if parsed is not None:
                types.append(parsed)
        quantity = data.get('quantity', 1)
        return cls(quantity=1 if quantity is None else quantity, types=types)

    def symbols(self) -> List[str]:
        """Every symbol this production could yield, in listed order."""
        result: List[str] = []
        for t in self.types:
            if isinstance(t, str):
                result.append(t)
            else:
                result.extend(t.options)
        return result

    def describe(self) -> str:
        parts = []
        for t in self.types:
            if isinstance(t, str):
                parts.append(f'{{{t}}}')
            elif isinstance(t, ManaChoice):
                parts.append(f"{{{'/'.join(t.options)}}}")
            else:
                parts.append(f"{{combo: {','.join(t.options)}}}")
        return f"{self.quantity}x{''.join(parts) or '?'}"

@dataclass
class ManaAbility:
    """A parsed mana ability: activation cost tokens plus what it produces."""
    activation_cost: List[str] = field(default_factory=lambda: ['{T}'])
    produces: List[ManaProduction] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ManaAbility':
        return cls(
            activation_cost=list(data.get('activationCost') or data.get('activation_cost') or []),
            produces=[p if isinstance(p, ManaProduction) else ManaProduction.from_dict(p)
                      for p in data.get('produces') or []],
        )

    @classmethod
    def fixed(cls, *symbols: str) -> 'ManaAbility':
        """'{T}: Add {symbols}' shorthand."""
        return cls(produces=[ManaProduction(quantity=1, types=[s.upper() for s in symbols])])

    @classmethod
    def choice(cls, *options: str) -> 'ManaAbility':
        """'{T}: Add one mana of any of these colors' shorthand."""
        return cls(produces=[ManaProduction(
            quantity=1, types=[ManaChoice(tuple(o.upper() for o in options))])])

    def producible_symbols(self) -> List[str]:
        """Distinct symbols this ability can produce, first-seen order."""
        seen: List[str] = []
        for production in self.produces:
            for symbol in production.symbols():
                if symbol not in seen:
                    seen.append(symbol)
        return seen

    def can_activate(self, permanent: Any) -> bool:
        """
        Check the activation cost against the permanent's board state.

        ``{T}`` needs an untapped permanent that is not summoning sick (for
        creatures). Any other braced token is a mana payment, which a
        potential source can't make. Remaining tokens (sacrifice, life) are
        treated as payable.
        """
        for token in self.activation_cost:
            if token == '{T}':
                if getattr(permanent, 'tapped', False):
                    return False
                if getattr(permanent, 'summoning_sick', False) and _is_creature(permanent):
                    return False
            elif token.startswith('{') and token.endswith('}'):
                return False
        return True

    def describe(self) -> str:
        if not self.produces:
            return 'nothing'
        return ' + '.join(p.describe() for p in self.produces)

def _is_creature(permanent: Any) -> bool:
    is_creature = getattr(permanent, 'is_creature', None)
    return bool(is_creature()) if callable(is_creature) else False

@dataclass
class ManaAbilityData:
    """Manifest entry for one card name."""
    has_mana_ability: bool = False
    abilities: List[ManaAbility] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ManaAbilityData':
        abilities = [a if isinstance(a, ManaAbility) else ManaAbility.from_dict(a)
                     for a in data.get('abilities') or []]
        has = data.get('hasManaAbility', data.get('has_mana_ability'))
        return cls(has_mana_ability=bool(abilities) if has is None else bool(has),
                   abilities=abilities)

    @classmethod
    def of(cls, *abilities: ManaAbility) -> 'ManaAbilityData':
        return cls(has_mana_ability=bool(abilities), abilities=list(abilities))

# =============================================================================
# Potential mana
# =============================================================================

@dataclass(frozen=True)
class PotentialManaEntry:
    """
    One not-yet-activated mana ability that could be activated right now.

    Built fresh immediately before each solve and discarded after; the
    entry only references the permanent, it never owns it.
    """
    source: str            # 'land', 'artifact' or 'creature'
    source_name: str
    ability: ManaAbility
    permanent: Any = field(default=None, compare=False)
    ability_index: int = 0

    def can_produce(self, symbol: str) -> bool:
        return symbol in self.ability.producible_symbols()


__all__ = [
    'ManaChoice',
    'ManaCombination',
    'ProductionType',
    'ManaProduction',
    'ManaAbility',
    'ManaAbilityData',
    'PotentialManaEntry',
]
