"""Filter matching for static effects.

Goldfishing has one player, so the ``controller == 'you'`` clause matches
every permanent. Types are read as printed; types added in layer 4 do not
widen later filters.
"""
from typing import Any, Optional

from .model import AffectedFilter


def _type_words(obj: Any) -> list:
    return [str(t).lower() for t in (getattr(obj, 'types', None) or [])]


def _key(obj: Any) -> str:
    return getattr(obj, 'id', None) or getattr(obj, 'name', '') or ''


def permanent_matches_filter(permanent: Any, affected_filter: Optional[AffectedFilter],
                             source: Any = None) -> bool:
    """
    Check whether a permanent is affected by an effect's filter.

    A card type matches on the category, any explicit type, or the type
    line. Subtypes match on the type line or the explicit type list. With
    ``exclude_self`` the effect's own source is skipped.
    """
    if permanent is None or affected_filter is None:
        return False

    category = (getattr(permanent, 'category', '') or '').lower()
    types = _type_words(permanent)
    type_line = (getattr(permanent, 'type_line', '') or '').lower()

    if affected_filter.card_types:
        if not any(card_type in category
                   or any(card_type in t for t in types)
                   or card_type in type_line
                   for card_type in affected_filter.card_types):
            return False

    if affected_filter.subtypes:
        if not any(subtype in type_line or subtype in types
                   for subtype in affected_filter.subtypes):
            return False

    if affected_filter.exclude_self and source is not None:
        if permanent is source or _key(permanent) == _key(source):
            return False

    return True


def spell_matches_cost_filter(spell: Any, affected_filter: Optional[AffectedFilter]) -> bool:
    """Check whether a cost modification applies to a spell being cast."""
    if spell is None or affected_filter is None or not affected_filter.is_spell:
        return False
    if affected_filter.matches_all_spells:
        return True
    if not affected_filter.spell_types:
        return False

    category = (getattr(spell, 'category', '') or '').lower()
    types = _type_words(spell)
    type_line = (getattr(spell, 'type_line', '') or '').lower()
    return any(spell_type in category or spell_type in types or spell_type in type_line
               for spell_type in affected_filter.spell_types)


__all__ = ['permanent_matches_filter', 'spell_matches_cost_filter']
