"""
Shared pytest fixtures for the goldfish engine tests.

This module provides reusable fixtures for common scenarios:
- A fresh simulation state with an initialized effect registry
- Factories for creatures, lands and plain cards
- A handful of well-known static-effect cards
"""

import pytest

from goldfish.config import EngineConfig
from goldfish.mana_abilities import ManaAbility, ManaAbilityData
from goldfish.objects import Card, Permanent
from goldfish.state import BehaviorManifest, GoldfishState


# =============================================================================
# State Fixtures
# =============================================================================

@pytest.fixture
def config():
    """Default engine configuration with event recording on."""
    return EngineConfig(verbose=False, record_events=True)


@pytest.fixture
def state(config):
    """
    Create an empty simulated game.

    Returns:
        GoldfishState: registry initialized, empty battlefield, empty hand.

    Usage:
        def test_something(state):
            assert state.effect_registry.is_empty()
    """
    return GoldfishState(config=config)


@pytest.fixture
def manifest():
    """Mana abilities for a few common sources."""
    return BehaviorManifest(mana_abilities={
        'Forest': ManaAbilityData.of(ManaAbility.fixed('G')),
        'Island': ManaAbilityData.of(ManaAbility.fixed('U')),
        'Swamp': ManaAbilityData.of(ManaAbility.fixed('B')),
        'Wastes': ManaAbilityData.of(ManaAbility.fixed('C')),
        'Llanowar Elves': ManaAbilityData.of(ManaAbility.fixed('G')),
        'Arcane Signet': ManaAbilityData.of(ManaAbility.choice('W', 'U', 'B', 'R', 'G')),
    })


@pytest.fixture
def mana_state(config, manifest):
    """Game state that knows how the fixture lands and rocks make mana."""
    return GoldfishState(config=config, behavior_manifest=manifest)


# =============================================================================
# Card Factories
# =============================================================================

@pytest.fixture
def make_creature():
    """
    Factory for creature permanents.

    Usage:
        bear = make_creature('Grizzly Bears', 2, 2)
    """
    def _make(name='Grizzly Bears', power=2, toughness=2,
              type_line='Creature — Bear', oracle_text='', **kwargs):
        return Permanent.from_card(Card(
            name=name, type_line=type_line, power=power, toughness=toughness,
            oracle_text=oracle_text, **kwargs))
    return _make


@pytest.fixture
def make_land():
    """Factory for untapped basic-style lands."""
    def _make(name='Forest', tapped=False):
        land = Permanent.from_card(Card(name=name, type_line=f'Basic Land — {name}'))
        land.tapped = tapped
        return land
    return _make


@pytest.fixture
def make_card():
    """Factory for cards in hand."""
    def _make(name='Spell', type_line='Instant', mana_cost='', **kwargs):
        return Card(name=name, type_line=type_line, mana_cost=mana_cost, **kwargs)
    return _make


# =============================================================================
# Static Effect Cards
# =============================================================================

@pytest.fixture
def glorious_anthem():
    return Card(name='Glorious Anthem', type_line='Enchantment', mana_cost='{1}{W}{W}',
                oracle_text='Creatures you control get +1/+1.')


@pytest.fixture
def creature_reducer():
    return Card(name="Herald's Horn", type_line='Artifact', mana_cost='{3}',
                oracle_text="As Herald's Horn enters the battlefield, choose a creature type.\n"
                            "Creature spells you cast cost {1} less to cast.")


@pytest.fixture
def benalish_marshal():
    return Card(name='Benalish Marshal', type_line='Creature — Human Knight',
                mana_cost='{W}{W}{W}', power=3, toughness=3,
                oracle_text='Other creatures you control get +1/+1.')


@pytest.fixture
def goblin_banner():
    return Card(name='Goblin Banner', type_line='Enchantment', mana_cost='{1}{R}',
                oracle_text='Goblin creatures you control get +1/+1.')


@pytest.fixture
def sky_anthem():
    return Card(name='Levitation', type_line='Enchantment', mana_cost='{2}{U}{U}',
                oracle_text='Creatures you control have flying.')
