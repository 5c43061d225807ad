"""Goldfish Engine - Static Effect Descriptors

A ``StaticEffect`` is an immutable record produced by the detector (or built
by hand for type changes). Its ``modification`` is one variant of a small
tagged union; the variant must agree with the effect's ``category``.
"""
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple, Union

from ..types import ALL_SPELLS, EffectCategory, Layer, SourceId, Timestamp


# =============================================================================
# Filters
# =============================================================================

@dataclass(frozen=True)
class AffectedFilter:
    """
    Which objects an effect applies to.

    Permanent filters use ``card_types``/``subtypes``/``exclude_self``.
    Cost filters set ``is_spell`` and list ``spell_types`` (``'all'``
    matches every spell).
    """
    card_types: Tuple[str, ...] = ()
    subtypes: Tuple[str, ...] = ()
    exclude_self: bool = False
    controller: str = 'you'
    spell_types: Tuple[str, ...] = ()
    is_spell: bool = False

    @classmethod
    def creatures(cls, subtype: Optional[str] = None,
                  exclude_self: bool = False) -> 'AffectedFilter':
        return cls(card_types=('creature',),
                   subtypes=(subtype.lower(),) if subtype else (),
                   exclude_self=exclude_self)

    @classmethod
    def spells(cls, spell_type: str = ALL_SPELLS) -> 'AffectedFilter':
        return cls(spell_types=(spell_type,), is_spell=True)

    @property
    def matches_all_spells(self) -> bool:
        return ALL_SPELLS in self.spell_types


# =============================================================================
# Modifications (one variant per category)
# =============================================================================

@dataclass(frozen=True)
class PowerToughnessMod:
    """+N/+N or -N/-N (layer 7c)."""
    power: int = 0
    toughness: int = 0


@dataclass(frozen=True)
class KeywordGrant:
    """Grants one keyword (layer 6)."""
    keyword: str


@dataclass(frozen=True)
class CostModification:
    """Generic mana added to or removed from matching spells. Not layered."""
    generic_reduction: int = 0
    generic_increase: int = 0

    def __post_init__(self):
        if self.generic_reduction < 0 or self.generic_increase < 0:
            raise ValueError("Cost modification amounts must be >= 0")
        if self.generic_reduction and self.generic_increase:
            raise ValueError("A cost modification either reduces or increases, not both")


@dataclass(frozen=True)
class TypeChange:
    """Adds types in addition to the printed ones (layer 4)."""
    types: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ColorChange:
    """Sets colors. Carried in the registry but not applied by the layer engine."""
    colors: Tuple[str, ...] = ()


Modification = Union[PowerToughnessMod, KeywordGrant, CostModification,
                     TypeChange, ColorChange]

# Category -> (payload variant, layer). Cost and color effects are not layered.
CATEGORY_SHAPES = {
    EffectCategory.POWER_TOUGHNESS: (PowerToughnessMod, Layer.LAYER_7C_MODIFY_PT),
    EffectCategory.KEYWORD_GRANT: (KeywordGrant, Layer.LAYER_6_ABILITY),
    EffectCategory.COST_MODIFICATION: (CostModification, None),
    EffectCategory.TYPE_CHANGE: (TypeChange, Layer.LAYER_4_TYPE),
    EffectCategory.COLOR_CHANGE: (ColorChange, None),
}


def layer_for_category(category: EffectCategory) -> Optional[Layer]:
    return CATEGORY_SHAPES[category][1]


# =============================================================================
# Static Effect
# =============================================================================

@dataclass(frozen=True)
class StaticEffect:
    """
    One continuously applied modification.

    Attributes:
        category: What kind of modification this is
        layer: Layer it applies in, None for cost and color effects
        affected_filter: Which objects it applies to
        modification: Payload variant matching ``category``
        source: Permanent generating the effect (not compared)
        source_id: Registry key of the source
        timestamp: Creation order, oldest first within a layer (CR 613.7)
    """
    category: EffectCategory
    layer: Optional[Layer]
    affected_filter: AffectedFilter
    modification: Modification
    source: Any = field(default=None, compare=False, repr=False)
    source_id: SourceId = ""
    timestamp: Timestamp = 0

    def __post_init__(self):
        expected_type, expected_layer = CATEGORY_SHAPES[self.category]
        if not isinstance(self.modification, expected_type):
            raise ValueError(
                f"{self.category.value} effect needs a {expected_type.__name__} "
                f"modification, got {type(self.modification).__name__}")
        if self.layer != expected_layer:
            raise ValueError(
                f"{self.category.value} effect belongs in layer "
                f"{expected_layer.value if expected_layer else None}, got {self.layer}")

    @classmethod
    def build(cls, category: EffectCategory, affected_filter: AffectedFilter,
              modification: Modification, source: Any = None,
              timestamp: Timestamp = 0) -> 'StaticEffect':
        """Create an effect with the layer implied by its category."""
        return cls(
            category=category,
            layer=layer_for_category(category),
            affected_filter=affected_filter,
            modification=modification,
            source=source,
            source_id=_source_key(source),
            timestamp=timestamp,
        )

    def with_source(self, source: Any, source_id: SourceId) -> 'StaticEffect':
        """Copy bound to a registry key."""
        return StaticEffect(self.category, self.layer, self.affected_filter,
                            self.modification, source, source_id, self.timestamp)

    @property
    def source_name(self) -> str:
        return getattr(self.source, 'name', '') or self.source_id


def _source_key(source: Any) -> str:
    if source is None:
        return ""
    return getattr(source, 'id', None) or getattr(source, 'name', '') or ""


__all__ = [
    'AffectedFilter',
    'PowerToughnessMod',
    'KeywordGrant',
    'CostModification',
    'TypeChange',
    'ColorChange',
    'Modification',
    'CATEGORY_SHAPES',
    'layer_for_category',
    'StaticEffect',
]
