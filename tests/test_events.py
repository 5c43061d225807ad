"""
Test suite for the event log and engine configuration.

Tests cover:
- Sequence numbering and history bounds
- Subscriptions (including base-class subscriptions)
- Subscriber failures not interrupting emission
- Logging of warning-level events
- Configuration validation
"""
import logging

import pytest

from goldfish.config import EngineConfig
from goldfish.events import (
    EffectsRegisteredEvent,
    EngineEvent,
    EngineWarningEvent,
    EventLog,
    LayersAppliedEvent,
    ManaPaidEvent,
)


@pytest.fixture
def log():
    return EventLog()


# =============================================================================
# EMISSION TESTS
# =============================================================================

class TestEmit:
    """Tests for emit() and the recorded history."""

    def test_sequence_numbers_increase(self, log):
        first = log.emit(EngineEvent())
        second = log.emit(EngineEvent())
        assert (first.sequence, second.sequence) == (0, 1)

    def test_emit_returns_same_event(self, log):
        event = EffectsRegisteredEvent(source_name='Glorious Anthem')
        assert log.emit(event) is event

    def test_bounded_history(self):
        """Oldest events are dropped past the bound."""
        log = EventLog(max_history=2)
        for _ in range(3):
            log.emit(EngineEvent())
        assert [e.sequence for e in log.records] == [1, 2]

    def test_zero_bound_is_unbounded(self):
        log = EventLog(max_history=0)
        for _ in range(1500):
            log.emit(EngineEvent())
        assert len(log) == 1500

    def test_recording_disabled(self):
        """Without recording, subscribers still hear every event."""
        log = EventLog(record=False)
        heard = []
        log.subscribe(EngineEvent, heard.append)
        log.emit(EngineEvent())
        assert len(log) == 0
        assert len(heard) == 1

    def test_of_type_and_last(self, log):
        log.emit(LayersAppliedEvent(pt_modifications=1))
        log.emit(EngineWarningEvent(message='first'))
        log.emit(LayersAppliedEvent(pt_modifications=2))
        assert len(log.of_type(LayersAppliedEvent)) == 2
        assert log.last(LayersAppliedEvent).pt_modifications == 2
        assert log.last(EngineWarningEvent).message == 'first'
        assert log.last(ManaPaidEvent) is None

    def test_clear_keeps_sequence(self, log):
        log.emit(EngineEvent())
        log.clear()
        assert log.records == []
        assert log.emit(EngineEvent()).sequence == 1

    def test_from_config(self):
        log = EventLog.from_config(EngineConfig(record_events=False))
        log.emit(EngineEvent())
        assert len(log) == 0


# =============================================================================
# SUBSCRIPTION TESTS
# =============================================================================

class TestSubscribe:
    """Tests for subscribe()/unsubscribe()."""

    def test_exact_type(self, log):
        heard = []
        log.subscribe(LayersAppliedEvent, heard.append)
        log.emit(LayersAppliedEvent())
        log.emit(EngineWarningEvent())
        assert [type(e) for e in heard] == [LayersAppliedEvent]

    def test_base_class_receives_all(self, log):
        heard = []
        log.subscribe(EngineEvent, heard.append)
        log.emit(LayersAppliedEvent())
        log.emit(EngineWarningEvent())
        assert len(heard) == 2

    def test_duplicate_subscription_ignored(self, log):
        heard = []
        log.subscribe(EngineEvent, heard.append)
        log.subscribe(EngineEvent, heard.append)
        log.emit(EngineEvent())
        assert len(heard) == 1

    def test_unsubscribe(self, log):
        heard = []
        log.subscribe(EngineEvent, heard.append)
        assert log.unsubscribe(EngineEvent, heard.append)
        assert not log.unsubscribe(EngineEvent, heard.append)
        log.emit(EngineEvent())
        assert heard == []

    def test_failing_subscriber_does_not_break_emit(self, log, caplog):
        """A raising subscriber is logged and the others still run."""
        heard = []

        def broken(event):
            raise RuntimeError('boom')

        log.subscribe(EngineEvent, broken)
        log.subscribe(EngineEvent, heard.append)
        with caplog.at_level(logging.ERROR, logger='goldfish.events'):
            log.emit(EngineEvent())
        assert len(heard) == 1
        assert 'Error in event subscriber' in caplog.text


# =============================================================================
# LOGGING TESTS
# =============================================================================

class TestEventLogging:
    """Tests for log levels."""

    def test_warning_logged(self, log, caplog):
        with caplog.at_level(logging.WARNING, logger='goldfish.events'):
            log.warn('Unknown X rule: X=mystery, defaulting to 1')
        assert 'Unknown X rule' in caplog.text

    def test_info_silent_unless_verbose(self, caplog):
        with caplog.at_level(logging.INFO, logger='goldfish.events'):
            EventLog().emit(LayersAppliedEvent())
            assert caplog.text == ''
            EventLog(verbose=True).emit(LayersAppliedEvent())
        assert 'Layers applied' in caplog.text

    def test_paid_event_levels(self):
        assert ManaPaidEvent(cost='{G}').level == logging.INFO
        assert ManaPaidEvent(cost='{G}', shortfall=1).level == logging.ERROR

    def test_describe(self):
        event = EffectsRegisteredEvent(source_name='Glorious Anthem',
                                       categories=('power_toughness',))
        assert event.describe() == \
            'Registered 1 static effect(s) from Glorious Anthem: power_toughness'


# =============================================================================
# CONFIG TESTS
# =============================================================================

class TestEngineConfig:
    """Tests for EngineConfig validation."""

    def test_defaults(self):
        config = EngineConfig()
        assert config.commander_tax_per_cast == 2
        assert config.commander_need_weight == 3
        assert config.record_events

    def test_negative_history_rejected(self):
        with pytest.raises(ValueError):
            EngineConfig(max_event_history=-1)

    def test_negative_tax_rejected(self):
        with pytest.raises(ValueError):
            EngineConfig(commander_tax_per_cast=-2)
