"""
Test suite for the effect registry.

Tests cover:
- Registration and id assignment
- Removal by source without touching other sources
- Battlefield rescans
- Queries, statistics and summaries
- Event emission
"""
import pytest

from goldfish.effects.model import AffectedFilter, StaticEffect, TypeChange
from goldfish.effects.registry import EffectRegistry, create_registry_for_game
from goldfish.events import (
    BattlefieldScannedEvent,
    EffectsRegisteredEvent,
    EffectsUnregisteredEvent,
)
from goldfish.objects import Card, Permanent
from goldfish.types import EffectCategory, Layer


@pytest.fixture
def registry():
    return EffectRegistry()


def permanent_of(card):
    return Permanent.from_card(card)


# =============================================================================
# REGISTRATION TESTS
# =============================================================================

class TestRegister:
    """Tests for register()."""

    def test_register_stores_effects(self, registry, glorious_anthem):
        """Detected effects are stored by source and in the flat list."""
        anthem = permanent_of(glorious_anthem)
        effects = registry.register(anthem)
        assert len(effects) == 1
        assert registry.count() == 1
        assert registry.has_effects(anthem)
        assert registry.get_effects_from_source(anthem) == effects

    def test_register_assigns_id(self, registry, glorious_anthem):
        """A permanent without an id gets a stable one."""
        anthem = permanent_of(glorious_anthem)
        registry.register(anthem)
        assert anthem.id.startswith('Glorious Anthem_')
        assert registry.all_effects[0].source_id == anthem.id

    def test_register_keeps_existing_id(self, registry, glorious_anthem):
        """An existing id is reused."""
        anthem = permanent_of(glorious_anthem)
        anthem.id = 'anthem-42'
        registry.register(anthem)
        assert 'anthem-42' in registry.effects_by_source

    def test_register_without_effects_is_noop(self, registry, make_creature):
        """Permanents without static abilities are not stored and get no id."""
        bear = make_creature()
        assert registry.register(bear) == []
        assert registry.is_empty()
        assert bear.id is None

    def test_register_none(self, registry):
        """None degrades to nothing registered."""
        assert registry.register(None) == []

    def test_reregister_replaces(self, registry, glorious_anthem):
        """Registering the same source twice does not duplicate its effects."""
        anthem = permanent_of(glorious_anthem)
        registry.register(anthem)
        registry.register(anthem)
        assert registry.count() == 1
        stats = registry.get_stats()
        assert stats['total_effects_registered'] == 2
        assert stats['total_effects_removed'] == 1

    def test_timestamps_increase(self, registry, glorious_anthem, sky_anthem):
        """Later registrations get later timestamps."""
        first = registry.register(permanent_of(glorious_anthem))[0]
        second = registry.register(permanent_of(sky_anthem))[0]
        assert first.timestamp < second.timestamp

    def test_add_effect(self, registry, make_creature):
        """Pre-built effects (type changes) can be added directly."""
        source = make_creature('Arcane Adaptation')
        effect = StaticEffect.build(EffectCategory.TYPE_CHANGE,
                                    AffectedFilter.creatures(), TypeChange(('warrior',)),
                                    source=source)
        stored = registry.add_effect(effect)
        assert stored.timestamp > 0
        assert registry.get_effects_by_layer(Layer.LAYER_4_TYPE) == [stored]


# =============================================================================
# REMOVAL TESTS
# =============================================================================

class TestUnregister:
    """Tests for unregister()."""

    def test_unregister_removes_source(self, registry, glorious_anthem):
        """All of a source's effects leave both indexes."""
        anthem = permanent_of(glorious_anthem)
        registry.register(anthem)
        assert registry.unregister(anthem) == 1
        assert registry.is_empty()
        assert not registry.has_effects(anthem)

    def test_unregister_unknown_is_noop(self, registry, glorious_anthem, sky_anthem):
        """Unregistering a never-registered permanent changes nothing."""
        registry.register(permanent_of(glorious_anthem))
        before = registry.get_stats()
        assert registry.unregister(permanent_of(sky_anthem)) == 0
        assert registry.get_stats() == before

    def test_unregister_keeps_other_copies(self, registry, glorious_anthem):
        """Two copies of one card are independent sources."""
        first = permanent_of(glorious_anthem)
        second = permanent_of(glorious_anthem)
        registry.register(first)
        registry.register(second)
        assert first.id != second.id

        registry.unregister(first)
        assert registry.count() == 1
        assert registry.all_effects[0].source is second

    def test_unregister_keeps_same_category_from_others(self, registry, glorious_anthem):
        """Effects of the same category from another source survive."""
        anthem = permanent_of(glorious_anthem)
        crusade = permanent_of(Card(name='Crusade', type_line='Enchantment',
                                    oracle_text='Creatures you control get +1/+1.'))
        registry.register(anthem)
        registry.register(crusade)
        registry.unregister(anthem)
        assert [e.source_name for e in registry.get_anthem_effects()] == ['Crusade']

    def test_flat_list_is_union_of_sources(self, registry, glorious_anthem,
                                           sky_anthem, creature_reducer):
        """The flat list always equals the per-source lists combined."""
        permanents = [permanent_of(c) for c in (glorious_anthem, sky_anthem, creature_reducer)]
        for p in permanents:
            registry.register(p)
        registry.unregister(permanents[1])

        union = [e for effects in registry.effects_by_source.values() for e in effects]
        assert sorted(map(id, union)) == sorted(map(id, registry.all_effects))


# =============================================================================
# SCAN TESTS
# =============================================================================

class TestScanBattlefield:
    """Tests for scan_battlefield()."""

    def test_scan_registers_permanent_zones(self, state, glorious_anthem, creature_reducer):
        """Every permanent zone except lands is scanned."""
        state.battlefield.enchantments.append(permanent_of(glorious_anthem))
        state.battlefield.artifacts.append(permanent_of(creature_reducer))
        state.battlefield.lands.append(permanent_of(Card(
            name='Odd Land', type_line='Land',
            oracle_text='Creatures you control get +1/+1.')))

        registry = EffectRegistry()
        assert registry.scan_battlefield(state) == 2
        assert registry.count() == 2

    def test_scan_clears_stale_effects(self, state, glorious_anthem):
        """Effects of permanents no longer in play disappear."""
        registry = EffectRegistry()
        registry.register(permanent_of(glorious_anthem))
        registry.scan_battlefield(state)
        assert registry.is_empty()

    def test_scan_is_repeatable(self, state, glorious_anthem):
        """Scanning twice gives the same registry contents."""
        state.battlefield.enchantments.append(permanent_of(glorious_anthem))
        registry = EffectRegistry()
        registry.scan_battlefield(state)
        first = [(e.category, e.source_id) for e in registry.all_effects]
        registry.scan_battlefield(state)
        assert [(e.category, e.source_id) for e in registry.all_effects] == first

    def test_rebuilt_registry_keeps_ids_unique(self, state, glorious_anthem, make_creature):
        """A copy entering after a rebuild never reuses an existing id."""
        bear = state.put_onto_battlefield(make_creature())
        first = state.put_onto_battlefield(glorious_anthem)
        state.effect_registry = create_registry_for_game(state)
        second = state.put_onto_battlefield(glorious_anthem)

        assert first.id != second.id
        assert state.effect_registry.count() == 2
        assert bear.static_effects.power_mod == 2

    def test_ids_unique_across_registries(self, glorious_anthem):
        first, second = permanent_of(glorious_anthem), permanent_of(glorious_anthem)
        EffectRegistry().register(first)
        EffectRegistry().register(second)
        assert first.id != second.id

    def test_create_registry_for_game(self, state, glorious_anthem):
        """Helper builds a populated registry on the state's event log."""
        state.battlefield.enchantments.append(permanent_of(glorious_anthem))
        registry = create_registry_for_game(state)
        assert registry.count() == 1
        assert registry.events is state.events


# =============================================================================
# QUERY AND REPORTING TESTS
# =============================================================================

class TestQueries:
    """Tests for queries, stats and summaries."""

    def test_category_and_layer_queries(self, registry, glorious_anthem,
                                        sky_anthem, creature_reducer):
        """Effects can be filtered by category and layer."""
        for c in (glorious_anthem, sky_anthem, creature_reducer):
            registry.register(permanent_of(c))
        assert len(registry.get_anthem_effects()) == 1
        assert len(registry.get_keyword_grant_effects()) == 1
        assert len(registry.get_cost_modification_effects()) == 1
        assert len(registry.get_effects_by_layer(Layer.LAYER_7C_MODIFY_PT)) == 1
        assert len(registry.get_effects_by_layer(Layer.LAYER_6_ABILITY)) == 1

    def test_empty_summary(self, registry):
        assert registry.get_summary() == 'No static effects active'

    def test_summary(self, registry, glorious_anthem, sky_anthem):
        """Summary counts effects by kind."""
        registry.register(permanent_of(glorious_anthem))
        registry.register(permanent_of(sky_anthem))
        assert registry.get_summary() == '2 active effect(s): 1 anthem(s), 1 keyword grant(s)'

    def test_stats_breakdowns(self, registry, creature_reducer):
        """Stats include per-category and per-layer counts."""
        registry.register(permanent_of(creature_reducer))
        stats = registry.get_stats()
        assert stats['current_active_effects'] == 1
        assert stats['effects_by_category']['cost_modification'] == 1
        assert stats['effects_by_layer']['cost_mods'] == 1
        assert stats['effects_by_layer'][7] == 0

    def test_describe(self, registry, glorious_anthem):
        """Details list each source."""
        anthem = permanent_of(glorious_anthem)
        registry.register(anthem)
        text = registry.describe()
        assert f'{anthem.id}: 1 effect(s)' in text


# =============================================================================
# EVENT TESTS
# =============================================================================

class TestRegistryEvents:
    """Tests for emitted events."""

    def test_register_and_unregister_events(self, registry, glorious_anthem):
        """Register/unregister each leave one structured record."""
        anthem = permanent_of(glorious_anthem)
        registry.register(anthem)
        registry.unregister(anthem)

        registered = registry.events.of_type(EffectsRegisteredEvent)
        removed = registry.events.of_type(EffectsUnregisteredEvent)
        assert registered[0].source_name == 'Glorious Anthem'
        assert registered[0].categories == ('power_toughness',)
        assert removed[0].removed == 1

    def test_scan_event(self, registry, state):
        """A scan reports how much it looked at."""
        registry.scan_battlefield(state)
        event = registry.events.last(BattlefieldScannedEvent)
        assert event.scanned == 0
        assert event.found == 0
