"""Goldfish Engine - Static Effect Detection

Detection is a fixed, ordered table of (pattern -> effect builder) rules
grouped into three families:

- anthems: "[other] [<subtype>] creatures you control get +X/+Y"
- keyword grants: "[other] [<subtype>] creatures|artifacts you control have <keyword>"
- cost modifiers: "<spell type> spells [you cast] cost {N} less|more"

Within a family the first matching rule wins. Anthems and keyword grants
produce at most one effect per card; cost modifiers are matched sentence by
sentence and produce at most one effect per sentence.

Only the phrasing and keyword vocabulary listed here are recognised. Text
that says the same thing differently is not detected.
"""
import re
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Pattern, Tuple

from ..types import ALL_SPELLS, KEYWORDS, SPELL_TYPES, EffectCategory, Timestamp
from .model import (
    AffectedFilter,
    CostModification,
    KeywordGrant,
    Modification,
    PowerToughnessMod,
    StaticEffect,
)

Clock = Callable[[], Timestamp]
Builder = Callable[[re.Match], Tuple[AffectedFilter, Modification]]

# Phrases that mark a card as worth running full detection on.
STATIC_ABILITY_PHRASES: Tuple[str, ...] = (
    'creatures you control get',
    'creatures you control have',
    'artifacts you control have',
    'spells you cast cost',
    'spells cost',
)

_PT = r'([+-]\d+)/([+-]\d+)'
_CLAUSE_START = r'(?:^|[.\n]\s*)'
_SENTENCE_SPLIT = re.compile(r'[.\n]')


@dataclass(frozen=True)
class DetectionRule:
    """One row of the detection table."""
    name: str
    category: EffectCategory
    pattern: Pattern
    build: Builder

    def match(self, text: str) -> Optional[re.Match]:
        return self.pattern.search(text)


# =============================================================================
# Anthems (layer 7c)
# =============================================================================

def _pt(match: re.Match, first: int) -> PowerToughnessMod:
    return PowerToughnessMod(int(match.group(first)), int(match.group(first + 1)))


ANTHEM_RULES: Tuple[DetectionRule, ...] = (
    DetectionRule(
        'other subtype anthem', EffectCategory.POWER_TOUGHNESS,
        re.compile(r'\bother (\w+) creatures you control get ' + _PT),
        lambda m: (AffectedFilter.creatures(subtype=m.group(1), exclude_self=True),
                   _pt(m, 2)),
    ),
    DetectionRule(
        'other creatures anthem', EffectCategory.POWER_TOUGHNESS,
        re.compile(r'\bother creatures you control get ' + _PT),
        lambda m: (AffectedFilter.creatures(exclude_self=True), _pt(m, 1)),
    ),
    DetectionRule(
        'subtype anthem', EffectCategory.POWER_TOUGHNESS,
        re.compile(_CLAUSE_START + r'(\w+) creatures you control get ' + _PT),
        lambda m: (AffectedFilter.creatures(subtype=m.group(1)), _pt(m, 2)),
    ),
    DetectionRule(
        'anthem', EffectCategory.POWER_TOUGHNESS,
        re.compile(r'creatures you control get ' + _PT),
        lambda m: (AffectedFilter.creatures(), _pt(m, 1)),
    ),
)


# =============================================================================
# Keyword grants (layer 6)
# =============================================================================

def _keyword_rules() -> Tuple[DetectionRule, ...]:
    variants = (
        ('other subtype creatures', r'\bother (\w+) creatures you control have ',
         lambda m: AffectedFilter.creatures(subtype=m.group(1), exclude_self=True)),
        ('other creatures', r'\bother creatures you control have ',
         lambda m: AffectedFilter.creatures(exclude_self=True)),
        ('subtype creatures', _CLAUSE_START + r'(\w+) creatures you control have ',
         lambda m: AffectedFilter.creatures(subtype=m.group(1))),
        ('creatures', r'creatures you control have ',
         lambda m: AffectedFilter.creatures()),
        ('artifacts', r'artifacts you control have ',
         lambda m: AffectedFilter(card_types=('artifact',))),
    )
    rules = []
    for label, prefix, make_filter in variants:
        for keyword in KEYWORDS:
            rules.append(DetectionRule(
                f'{label} have {keyword}', EffectCategory.KEYWORD_GRANT,
                re.compile(prefix + re.escape(keyword) + r'\b'),
                lambda m, f=make_filter, k=keyword: (f(m), KeywordGrant(k)),
            ))
    return tuple(rules)


KEYWORD_RULES: Tuple[DetectionRule, ...] = _keyword_rules()


# =============================================================================
# Cost modifiers (no layer)
# =============================================================================

def _cost_rules() -> Tuple[DetectionRule, ...]:
    rules = []
    for direction in ('less', 'more'):
        for spell_type in SPELL_TYPES:
            rules.append(DetectionRule(
                f'{spell_type} spells cost {direction}', EffectCategory.COST_MODIFICATION,
                re.compile(r'\b' + spell_type
                           + r' spells(?: you cast)? cost \{(\d+)\} ' + direction),
                lambda m, t=spell_type, d=direction: (AffectedFilter.spells(t),
                                                      _cost_mod(m, d)),
            ))
    for direction in ('less', 'more'):
        rules.append(DetectionRule(
            f'spells cost {direction}', EffectCategory.COST_MODIFICATION,
            re.compile(r'^\s*spells(?: you cast)? cost \{(\d+)\} ' + direction),
            lambda m, d=direction: (AffectedFilter.spells(ALL_SPELLS), _cost_mod(m, d)),
        ))
    return tuple(rules)


def _cost_mod(match: re.Match, direction: str) -> CostModification:
    amount = int(match.group(1))
    if direction == 'less':
        return CostModification(generic_reduction=amount)
    return CostModification(generic_increase=amount)


COST_RULES: Tuple[DetectionRule, ...] = _cost_rules()


# =============================================================================
# Detection
# =============================================================================

def _oracle_text(card: Any) -> str:
    if card is None:
        return ''
    return (getattr(card, 'oracle_text', '') or '').lower()


def _first_match(rules: Tuple[DetectionRule, ...],
                 text: str) -> Optional[Tuple[DetectionRule, re.Match]]:
    for rule in rules:
        match = rule.match(text)
        if match:
            return rule, match
    return None


def _make_effect(rule: DetectionRule, match: re.Match, card: Any,
                 clock: Clock) -> StaticEffect:
    affected_filter, modification = rule.build(match)
    return StaticEffect.build(rule.category, affected_filter, modification,
                              source=card, timestamp=clock())


def has_static_ability(card: Any) -> bool:
    """Quick phrase check before running full detection."""
    text = _oracle_text(card)
    return bool(text) and any(phrase in text for phrase in STATIC_ABILITY_PHRASES)


def detect_all_static_effects(card: Any, clock: Optional[Clock] = None) -> List[StaticEffect]:
    """
    Detect every static effect in a card's rules text.

    Args:
        card: Any object with ``oracle_text`` (and ``name``/``id`` for the source key)
        clock: Timestamp source; defaults to ``time.monotonic_ns``

    Returns:
        New effects in family order: anthem, keyword grant, cost modifiers.
        Cards without text or without a recognised phrase yield ``[]``.
    """
    text = _oracle_text(card)
    if not text:
        return []
    clock = clock or time.monotonic_ns

    effects: List[StaticEffect] = []
    for family in (ANTHEM_RULES, KEYWORD_RULES):
        found = _first_match(family, text)
        if found:
            effects.append(_make_effect(found[0], found[1], card, clock))

    for sentence in _SENTENCE_SPLIT.split(text):
        found = _first_match(COST_RULES, sentence.strip())
        if found:
            effects.append(_make_effect(found[0], found[1], card, clock))

    return effects


# =============================================================================
# Summaries
# =============================================================================

def format_effect_description(effect: StaticEffect) -> str:
    """Short human readable description, e.g. 'Creatures get +1/+1'."""
    mod = effect.modification
    if effect.category is EffectCategory.POWER_TOUGHNESS:
        sign = '+' if mod.power >= 0 else ''
        return f"Creatures get {sign}{mod.power}/{sign}{mod.toughness}"
    if effect.category is EffectCategory.KEYWORD_GRANT:
        return f"Creatures have {mod.keyword}"
    if effect.category is EffectCategory.COST_MODIFICATION:
        if mod.generic_reduction > 0:
            return f"Spells cost {{{mod.generic_reduction}}} less"
        if mod.generic_increase > 0:
            return f"Spells cost {{{mod.generic_increase}}} more"
        return 'Cost modification'
    if effect.category is EffectCategory.TYPE_CHANGE:
        return f"Become {' '.join(mod.types)} in addition"
    return effect.category.value


def get_static_effects_summary(card: Any) -> Dict[str, Any]:
    effects = detect_all_static_effects(card)
    return {
        'card_name': getattr(card, 'name', ''),
        'has_static_abilities': bool(effects),
        'effect_count': len(effects),
        'effect_types': [e.category.value for e in effects],
        'effects': [
            {
                'category': e.category.value,
                'layer': e.layer.value if e.layer else None,
                'description': format_effect_description(e),
            }
            for e in effects
        ],
    }


__all__ = [
    'STATIC_ABILITY_PHRASES',
    'DetectionRule',
    'ANTHEM_RULES',
    'KEYWORD_RULES',
    'COST_RULES',
    'has_static_ability',
    'detect_all_static_effects',
    'format_effect_description',
    'get_static_effects_summary',
]
