"""Goldfish Engine - Simulation Context

``GoldfishState`` is the explicit context handed to every engine function.
It owns the board, the effect registry, the mana pool and the event log for
exactly one simulated game; nothing is shared between games.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

from .config import EngineConfig
from .effects.engine import (
    initialize_static_effects_system,
    on_permanent_enters_battlefield,
    on_permanent_leaves_battlefield,
)
from .effects.registry import EffectRegistry
from .events import EventLog
from .mana import ManaPool
from .mana_abilities import ManaAbilityData
from .objects import Card, Permanent
from .types import BATTLEFIELD_ZONES, CATEGORY_ZONES, COLOR_ORDER


@dataclass
class Battlefield:
    """The five battlefield zones the simulator tracks."""
    creatures: List[Permanent] = field(default_factory=list)
    artifacts: List[Permanent] = field(default_factory=list)
    enchantments: List[Permanent] = field(default_factory=list)
    planeswalkers: List[Permanent] = field(default_factory=list)
    lands: List[Permanent] = field(default_factory=list)

    @staticmethod
    def zone_for(permanent: Any) -> str:
        """Zone a permanent belongs in; unknown categories go with enchantments."""
        return CATEGORY_ZONES.get(getattr(permanent, 'category', ''), 'enchantments')

    def zone(self, name: str) -> List[Permanent]:
        if name not in BATTLEFIELD_ZONES:
            raise ValueError(f"Unknown battlefield zone: {name!r}")
        return getattr(self, name)

    def add(self, permanent: Permanent) -> str:
        zone = self.zone_for(permanent)
        self.zone(zone).append(permanent)
        return zone

    def remove(self, permanent: Permanent) -> bool:
        """Remove by identity. Returns False if the permanent is not here."""
        for zone in BATTLEFIELD_ZONES:
            cards = getattr(self, zone)
            for index, card in enumerate(cards):
                if card is permanent:
                    del cards[index]
                    return True
        return False

    def permanents(self) -> Iterator[Permanent]:
        for zone in BATTLEFIELD_ZONES:
            yield from getattr(self, zone)

    def __contains__(self, permanent: Any) -> bool:
        return any(p is permanent for p in self.permanents())

    def __len__(self) -> int:
        return sum(len(getattr(self, zone)) for zone in BATTLEFIELD_ZONES)


@dataclass
class BehaviorManifest:
    """Externally parsed card behaviour; only mana abilities are consumed here."""
    mana_abilities: Dict[str, ManaAbilityData] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'BehaviorManifest':
        raw = data.get('manaAbilities') or data.get('mana_abilities') or {}
        return cls(mana_abilities={
            name: entry if isinstance(entry, ManaAbilityData) else ManaAbilityData.from_dict(entry)
            for name, entry in raw.items()
        })


class GoldfishState:
    """
    One simulated game.

    Attributes:
        config: Engine settings
        events: Event log shared by every component of this game
        battlefield: Permanents in play
        hand: Cards in hand
        command_zone: Commander(s) waiting to be cast
        behavior_manifest: Parsed mana abilities by card name
        strategy_colors: Deck's primary colors, most important first
        effect_registry: Active static effects (None until initialized)
        mana_pool: Floating mana
        last_sacrificed: Most recently sacrificed card (for X rules)
    """

    def __init__(self, config: Optional[EngineConfig] = None,
                 behavior_manifest: Optional[BehaviorManifest] = None,
                 strategy_colors: Optional[List[str]] = None,
                 initialize: bool = True):
        self.config = config or EngineConfig()
        self.events = EventLog.from_config(self.config)
        self.battlefield = Battlefield()
        self.hand: List[Card] = []
        self.command_zone: List[Card] = []
        self.behavior_manifest = behavior_manifest or BehaviorManifest()
        self.strategy_colors: List[str] = [c for c in (strategy_colors or []) if c in COLOR_ORDER]
        self.last_sacrificed: Optional[Card] = None
        self.mana_pool = ManaPool(events=self.events,
                                  commander_need_weight=self.config.commander_need_weight)
        self.effect_registry: Optional[EffectRegistry] = None
        if initialize:
            initialize_static_effects_system(self)

    def put_onto_battlefield(self, card: Union[Card, Permanent, Mapping[str, Any]],
                             summoning_sick: bool = False) -> Permanent:
        """Create a permanent (if needed), place it in its zone and update effects."""
        if isinstance(card, Permanent):
            permanent = card
            permanent.summoning_sick = summoning_sick or permanent.summoning_sick
        else:
            permanent = Permanent.from_card(card, summoning_sick=summoning_sick)
        self.battlefield.add(permanent)
        on_permanent_enters_battlefield(self, permanent)
        return permanent

    def remove_from_battlefield(self, permanent: Permanent) -> bool:
        """Take a permanent out of play and retract its effects."""
        if not self.battlefield.remove(permanent):
            return False
        on_permanent_leaves_battlefield(self, permanent)
        return True

    def sacrifice(self, permanent: Permanent) -> bool:
        if self.remove_from_battlefield(permanent):
            self.last_sacrificed = permanent
            return True
        return False

    @property
    def commander(self) -> Optional[Card]:
        return self.command_zone[0] if self.command_zone else None

    def __repr__(self) -> str:
        return (f"GoldfishState(permanents={len(self.battlefield)}, pool={self.mana_pool})")


__all__ = ['Battlefield', 'BehaviorManifest', 'GoldfishState']
