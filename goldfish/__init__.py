"""Goldfish engine - static effects and mana resolution, lazy imports to avoid circular dependencies"""

# Core types can be imported directly
from .types import (
    EffectCategory, Layer, KEYWORDS, SPELL_TYPES, MANA_SYMBOLS, COLOR_ORDER
)
from .config import EngineConfig

__version__ = '0.1.0'

# Where each lazily exported name lives
_LAZY = {
    'Card': '.objects',
    'Permanent': '.objects',
    'FinalStats': '.objects',
    'GoldfishState': '.state',
    'Battlefield': '.state',
    'BehaviorManifest': '.state',
    'EventLog': '.events',
    'ManaCost': '.mana',
    'ManaPool': '.mana',
    'parse_mana': '.mana',
    'build_cost_string': '.mana',
    'ManaAbility': '.mana_abilities',
    'ManaAbilityData': '.mana_abilities',
    'PotentialManaEntry': '.mana_abilities',
    'build_potential_mana_pool': '.solver',
    'solve_cost': '.solver',
    'ManaSolution': '.solver',
    'StaticEffect': '.effects.model',
    'EffectRegistry': '.effects.registry',
    'detect_all_static_effects': '.effects.detector',
    'apply_all_layers': '.effects.layers',
    'calculate_final_stats': '.effects.layers',
}


def __getattr__(name):
    """Lazy import for engine components."""
    module_name = _LAZY.get(name)
    if module_name is None:
        raise AttributeError(f"module 'goldfish' has no attribute {name!r}")
    from importlib import import_module
    return getattr(import_module(module_name, __name__), name)
