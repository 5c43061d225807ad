"""Static effects - detection, registry, layers, cost modification"""
from .model import (
    AffectedFilter, StaticEffect, PowerToughnessMod, KeywordGrant,
    CostModification, TypeChange, ColorChange
)
from .detector import detect_all_static_effects, has_static_ability
from .registry import EffectRegistry, create_registry_for_game
from .layers import apply_all_layers, calculate_final_stats, get_all_keywords
