"""Goldfish Engine - Core Types and Vocabularies

This module defines the enumerations, type aliases and fixed vocabularies
shared by the static-effects and mana subsystems. Only the three layers the
simulator models (CR 613.1d, 613.1f, 613.4c) are represented.
"""
from enum import Enum
from typing import Tuple


# =============================================================================
# Type Aliases
# =============================================================================

SourceId = str
Timestamp = int
ManaSymbolChar = str


# =============================================================================
# Mana Symbols
# =============================================================================

WHITE = 'W'
BLUE = 'U'
BLACK = 'B'
RED = 'R'
GREEN = 'G'
COLORLESS = 'C'

# WUBRG ordering follows official Magic convention. The solver and the
# generic-payment fallback both walk colors in this order.
COLOR_ORDER: Tuple[str, ...] = (WHITE, BLUE, BLACK, RED, GREEN)

# The six counters a mana pool tracks.
MANA_SYMBOLS: Tuple[str, ...] = COLOR_ORDER + (COLORLESS,)


# =============================================================================
# Static Effects
# =============================================================================

class EffectCategory(Enum):
    """What kind of modification a static effect performs."""
    POWER_TOUGHNESS = 'power_toughness'      # "Creatures you control get +1/+1"
    KEYWORD_GRANT = 'keyword_grant'          # "Creatures you control have flying"
    COST_MODIFICATION = 'cost_modification'  # "Creature spells cost {1} less"
    TYPE_CHANGE = 'type_change'              # "Goblins you control are Warriors"
    COLOR_CHANGE = 'color_change'            # "Creatures are white"


class Layer(Enum):
    """The subset of CR 613 layers applied by the layer engine.

    Cost modifications are not layered; they are read directly by the cost
    modifier when a spell is considered for casting.
    """
    # Layer 4: Type-changing effects (CR 613.1d)
    LAYER_4_TYPE = 4

    # Layer 6: Ability-adding/removing effects (CR 613.1f)
    LAYER_6_ABILITY = 6

    # Layer 7c: Modify P/T with +N/+N or -N/-N (CR 613.4c)
    LAYER_7C_MODIFY_PT = 7

    def __lt__(self, other):
        if isinstance(other, Layer):
            return self.value < other.value
        return NotImplemented

    def __le__(self, other):
        if isinstance(other, Layer):
            return self.value <= other.value
        return NotImplemented

    def __gt__(self, other):
        if isinstance(other, Layer):
            return self.value > other.value
        return NotImplemented

    def __ge__(self, other):
        if isinstance(other, Layer):
            return self.value >= other.value
        return NotImplemented


def get_all_layers_in_order() -> Tuple[Layer, ...]:
    """Get the modelled layers in application order."""
    return tuple(sorted(Layer, key=lambda l: l.value))


# =============================================================================
# Vocabularies
# =============================================================================

# Keywords recognised by keyword-grant detection and printed-keyword scans.
# Words outside this list are not detected.
KEYWORDS: Tuple[str, ...] = (
    'flying', 'first strike', 'double strike', 'deathtouch',
    'lifelink', 'vigilance', 'trample', 'menace', 'reach',
    'haste', 'defender', 'hexproof', 'indestructible',
)

# Spell types a cost modification can be qualified with.
SPELL_TYPES: Tuple[str, ...] = (
    'creature', 'artifact', 'enchantment', 'instant',
    'sorcery', 'planeswalker', 'legendary',
)

ALL_SPELLS = 'all'

# Battlefield zones holding permanents that can carry static abilities.
PERMANENT_ZONES: Tuple[str, ...] = (
    'creatures', 'artifacts', 'enchantments', 'planeswalkers',
)

# Every battlefield zone, including lands.
BATTLEFIELD_ZONES: Tuple[str, ...] = PERMANENT_ZONES + ('lands',)

# Card category -> battlefield zone.
CATEGORY_ZONES = {
    'creature': 'creatures',
    'artifact': 'artifacts',
    'enchantment': 'enchantments',
    'planeswalker': 'planeswalkers',
    'land': 'lands',
}


__all__ = [
    'SourceId', 'Timestamp', 'ManaSymbolChar',
    'WHITE', 'BLUE', 'BLACK', 'RED', 'GREEN', 'COLORLESS',
    'COLOR_ORDER', 'MANA_SYMBOLS',
    'EffectCategory', 'Layer', 'get_all_layers_in_order',
    'KEYWORDS', 'SPELL_TYPES', 'ALL_SPELLS',
    'PERMANENT_ZONES', 'BATTLEFIELD_ZONES', 'CATEGORY_ZONES',
]
