import pytest

from eqscope.engine import EngineLink, InMemoryEngine, MeterSnapshot


class FailingSink:
    def set_param(self, track_id, slot_id, index, value):
        raise RuntimeError("processor went away")


class WriteOnlySink:
    def __init__(self):
        self.writes = []

    def set_param(self, track_id, slot_id, index, value):
        self.writes.append((track_id, slot_id, index, value))


def test_writes_are_dropped_until_attached(engine):
    link = EngineLink(track_id=1)
    link.push(0, 0, 440.0)
    assert engine.writes == []
    assert not link.ready


def test_push_uses_flat_index_and_ids(link, engine):
    link.push(2, 3, 0.0)
    assert engine.writes == [(3, 1, 25, 0.0)]


def test_set_ready_gates_writes(link, engine):
    link.set_ready(False)
    link.push_global(704, 6.0)
    assert engine.writes == []
    link.set_ready(True)
    link.push_global(704, 6.0)
    assert engine.writes == [(3, 1, 704, 6.0)]


def test_attach_can_move_slot(engine):
    link = EngineLink(track_id=2, slot_id=0)
    link.attach(engine, slot_id=5)
    link.push(0, 1, 2.0)
    assert engine.writes == [(2, 5, 1, 2.0)]


def test_sink_failure_is_logged_not_raised(caplog):
    link = EngineLink()
    link.attach(FailingSink())
    link.push(0, 0, 100.0)
    assert "Parameter sink failed" in caplog.text
    assert any("failed" in msg for msg in link.poll_status())


def test_detach_stops_writes(link, engine):
    link.detach()
    link.push(0, 0, 100.0)
    assert engine.writes == []
    assert link.poll_status()[-1] == "Engine disconnected"


def test_read_requires_readable_sink(link, engine):
    engine.set_param(3, 1, 12, 880.0)
    assert link.can_read()
    assert link.read(1, 1) == pytest.approx(880.0)

    write_only = EngineLink()
    write_only.attach(WriteOnlySink())
    assert not write_only.can_read()
    assert write_only.read_global(0) is None


def test_status_queue_keeps_newest():
    link = EngineLink()
    for i in range(40):
        link._put_status(str(i))
    messages = link.poll_status()
    assert len(messages) == 32
    assert messages[-1] == "39"
    assert link.poll_status() == []


def test_in_memory_engine_is_scoped_by_track_and_slot():
    engine = InMemoryEngine()
    engine.set_param(0, 0, 1, 5.0)
    assert engine.get_param(0, 0, 1) == 5.0
    assert engine.get_param(0, 1, 1) == 0.0
    assert engine.written_indices() == [1]
    engine.clear_log()
    assert engine.writes == []
    assert engine.get_param(0, 0, 1) == 5.0


class FlakyMeters(WriteOnlySink):
    def get_meter(self, track_id, slot_id, channel):
        raise OSError("meter bus gone")


def test_read_meter_reports_all_four_channels(link, engine):
    for channel, level in enumerate([0.5, 0.25, 1.0, 0.1]):
        engine.set_meter(3, 1, channel, level)
    meter = link.read_meter()
    assert meter == MeterSnapshot(0.5, 0.25, 1.0, 0.1)
    assert meter.input_dbfs == pytest.approx(-6.0206, abs=1e-3)
    assert meter.output_dbfs == pytest.approx(0.0)


def test_read_meter_without_meters_or_engine():
    link = EngineLink()
    assert link.read_meter() is None
    link.attach(WriteOnlySink())
    assert link.read_meter() is None
    link.attach(FlakyMeters())
    assert link.read_meter() is None
