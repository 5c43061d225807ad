"""
Test suite for the potential mana solver.

Tests cover:
- Building the potential pool from untapped sources
- Greedy pip-then-generic claiming
- Failure reporting
- Known limits of the no-backtracking policy
"""
import pytest

from goldfish.events import EventLog, ManaSolvedEvent
from goldfish.mana_abilities import (
    ManaAbility,
    ManaAbilityData,
    ManaProduction,
    PotentialManaEntry,
)
from goldfish.objects import Card
from goldfish.solver import (
    build_potential_mana_pool,
    can_produce_color,
    choose_generic_color,
    solve_cost,
)


def entry(name, ability, source='land'):
    return PotentialManaEntry(source=source, source_name=name, ability=ability)


@pytest.fixture
def events():
    return EventLog()


# =============================================================================
# POTENTIAL POOL TESTS
# =============================================================================

class TestBuildPotentialPool:
    """Tests for build_potential_mana_pool()."""

    def test_untapped_lands(self, mana_state, make_land):
        """Each untapped land with a known ability is one entry."""
        mana_state.put_onto_battlefield(make_land('Forest'))
        mana_state.put_onto_battlefield(make_land('Island'))
        pool = build_potential_mana_pool(mana_state)
        assert [e.source_name for e in pool] == ['Forest', 'Island']
        assert all(e.source == 'land' for e in pool)

    def test_tapped_sources_skipped(self, mana_state, make_land):
        mana_state.put_onto_battlefield(make_land('Forest', tapped=True))
        assert build_potential_mana_pool(mana_state) == []

    def test_summoning_sick_creatures_skipped(self, mana_state, make_creature):
        """Sick creatures can't pay {T}; ready ones can."""
        mana_state.put_onto_battlefield(make_creature('Llanowar Elves', 1, 1),
                                        summoning_sick=True)
        assert build_potential_mana_pool(mana_state) == []

        elves = mana_state.battlefield.creatures[0]
        elves.summoning_sick = False
        assert [e.source for e in build_potential_mana_pool(mana_state)] == ['creature']

    def test_zone_order(self, mana_state, make_land, make_creature):
        """Lands, then artifacts, then creatures."""
        mana_state.put_onto_battlefield(make_creature('Llanowar Elves', 1, 1))
        mana_state.put_onto_battlefield(Card(name='Arcane Signet', type_line='Artifact'))
        mana_state.put_onto_battlefield(make_land('Swamp'))
        pool = build_potential_mana_pool(mana_state)
        assert [e.source for e in pool] == ['land', 'artifact', 'creature']

    def test_unknown_cards_skipped(self, mana_state, make_land):
        mana_state.put_onto_battlefield(make_land('Mystery Land'))
        assert build_potential_mana_pool(mana_state) == []

    def test_mana_activation_cost_excluded(self, mana_state, make_land):
        """Abilities that cost mana to activate can't be potential sources."""
        filter_land = ManaAbility(activation_cost=['{1}', '{T}'],
                                  produces=[ManaProduction(types=['W', 'W'])])
        mana_state.behavior_manifest.mana_abilities['Filter Land'] = ManaAbilityData.of(
            ManaAbility.fixed('C'), filter_land)
        mana_state.put_onto_battlefield(make_land('Filter Land'))
        pool = build_potential_mana_pool(mana_state)
        assert len(pool) == 1
        assert pool[0].ability_index == 0

    def test_raw_manifest_entries(self, mana_state, make_land):
        """Unparsed manifest dicts are accepted."""
        mana_state.behavior_manifest.mana_abilities['Plains'] = {
            'hasManaAbility': True,
            'abilities': [{'activationCost': ['{T}'],
                           'produces': [{'quantity': 1, 'types': ['W']}]}],
        }
        mana_state.put_onto_battlefield(make_land('Plains'))
        pool = build_potential_mana_pool(mana_state)
        assert pool[0].can_produce('W')


# =============================================================================
# SOLVING TESTS
# =============================================================================

class TestSolveCost:
    """Tests for solve_cost()."""

    def test_pip_then_generic(self, events):
        """{1}{G}: the G source covers the pip, the U source covers generic."""
        pool = [entry('Island', ManaAbility.fixed('U')),
                entry('Grove', ManaAbility.choice('G', 'C'))]
        solution = solve_cost('{1}{G}', pool, events=events)
        assert solution is not None
        assert solution.sources_used == ['Grove', 'Island']
        assert [p.chosen_color for p in solution.payments] == ['G', 'U']
        assert solution.total_paid['G'] == 1
        assert solution.total_paid['generic'] == 1

    def test_not_enough_sources(self, events):
        """One source can't pay two mana."""
        pool = [entry('Forest', ManaAbility.fixed('G'))]
        assert solve_cost('{1}{G}', pool, events=events) is None
        failure = events.last(ManaSolvedEvent)
        assert not failure.success
        assert failure.failed_on == 'generic {1}'

    def test_missing_color(self, events):
        pool = [entry('Forest', ManaAbility.fixed('G'))]
        assert solve_cost('{U}', pool, events=events) is None
        assert events.last(ManaSolvedEvent).failed_on == '{U}'

    def test_each_entry_claimed_once(self):
        pool = [entry('Forest', ManaAbility.fixed('G'))]
        assert solve_cost('{G}{G}', pool) is None

    def test_colorless_pip(self):
        """{C} pips need a source that makes colorless."""
        pool = [entry('Forest', ManaAbility.fixed('G')),
                entry('Wastes', ManaAbility.fixed('C'))]
        solution = solve_cost('{C}{G}', pool)
        assert solution.sources_used == ['Forest', 'Wastes']
        assert solve_cost('{C}', pool[:1]) is None

    def test_zero_cost(self):
        solution = solve_cost('', [])
        assert solution is not None
        assert len(solution) == 0

    def test_greedy_does_not_backtrack(self):
        """A flexible source spent on an earlier pip is not reconsidered."""
        pool = [entry('Dual', ManaAbility.choice('G', 'U')),
                entry('Island', ManaAbility.fixed('U'))]
        # U is claimed before G and takes the dual.
        assert solve_cost('{U}{G}', pool) is None

    def test_does_not_tap(self, mana_state, make_land):
        """Solving leaves the sources untapped."""
        forest = mana_state.put_onto_battlefield(make_land('Forest'))
        pool = build_potential_mana_pool(mana_state)
        assert mana_state.mana_pool.can_pay('{G}', potential_pool=pool, state=mana_state)
        assert not forest.tapped

    def test_success_event(self, mana_state, make_land):
        mana_state.put_onto_battlefield(make_land('Forest'))
        mana_state.put_onto_battlefield(make_land('Swamp'))
        pool = build_potential_mana_pool(mana_state)
        mana_state.mana_pool.solve_cost('{1}{B}', pool, mana_state)
        event = mana_state.events.last(ManaSolvedEvent)
        assert event.success
        assert event.cost == '{1}{B}'
        assert event.sources_used == ('Swamp', 'Forest')


class TestColorHelpers:
    """Tests for can_produce_color() and choose_generic_color()."""

    def test_can_produce_color(self):
        ability = ManaAbility.choice('W', 'B')
        assert can_produce_color(ability, 'B')
        assert not can_produce_color(ability, 'G')

    def test_generic_prefers_colorless(self):
        assert choose_generic_color(ManaAbility.choice('G', 'C')) == 'C'

    def test_generic_first_symbol(self):
        assert choose_generic_color(ManaAbility.choice('R', 'G')) == 'R'

    def test_generic_without_production(self):
        assert choose_generic_color(ManaAbility(produces=[])) == 'C'
