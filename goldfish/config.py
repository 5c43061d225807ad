"""Goldfish Engine - Configuration"""
from dataclasses import dataclass


@dataclass
class EngineConfig:
    """
    Configuration settings for one simulated game.

    Attributes:
        verbose: Mirror every engine event to the logger at INFO (default False)
        record_events: Keep emitted events in the event history (default True)
        max_event_history: Oldest events are dropped past this size (default 1000)
        commander_tax_per_cast: Generic mana added per prior commander cast (default 2)
        commander_need_weight: Weight of each commander pip when scoring
            hand color needs while the commander is in the command zone (default 3)
    """
    verbose: bool = False
    record_events: bool = True
    max_event_history: int = 1000
    commander_tax_per_cast: int = 2
    commander_need_weight: int = 3

    def __post_init__(self):
        if self.max_event_history < 0:
            raise ValueError(f"max_event_history must be >= 0, got {self.max_event_history}")
        if self.commander_tax_per_cast < 0:
            raise ValueError(
                f"commander_tax_per_cast must be >= 0, got {self.commander_tax_per_cast}")
