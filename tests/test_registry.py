import pytest

from eqscope.config import MAX_BANDS
from eqscope.dsp.filters import FilterShape, Placement
from eqscope.editor import BandRegistry
from eqscope.engine import EngineLink
from eqscope.engine.params import (
    AUTO_GAIN_INDEX,
    OUTPUT_GAIN_INDEX,
    SOLO_BAND_INDEX,
    ParamOffset,
    flat_index,
)


def test_add_band_writes_defaults_and_selects(registry, engine, changes):
    band = registry.add_band(440.0, FilterShape.NOTCH)
    assert band.index == 0
    assert registry.selected_index == 0
    assert engine.writes == [
        (3, 1, 0, 440.0),
        (3, 1, 1, 0.0),
        (3, 1, 2, 1.0),
        (3, 1, 3, 1.0),
        (3, 1, 4, 5.0),
    ]
    assert changes == [1]


def test_add_band_clamps_frequency(registry):
    assert registry.add_band(1.0).freq == 10.0
    assert registry.add_band(99999.0).freq == 30000.0


def test_band_limit(registry, engine, changes):
    for i in range(MAX_BANDS):
        registry.add_band(100.0 + i)
    engine.clear_log()
    changes.clear()
    assert registry.add_band(500.0) is None
    assert len(registry) == MAX_BANDS
    assert engine.writes == []
    assert changes == []


def test_remove_soft_deletes_by_slot(five_bands, engine):
    removed = five_bands.remove_band(2)
    assert removed.index == 2
    assert engine.writes == [(3, 1, 25, 0.0)]
    assert len(five_bands) == 4
    assert five_bands.selected_index == 1


def test_remove_first_and_last(five_bands):
    five_bands.remove_band(0)
    assert five_bands.selected_index == 0
    for _ in range(4):
        five_bands.remove_band(0)
    assert len(five_bands) == 0
    assert five_bands.selected_index is None


def test_remove_out_of_range_is_noop(five_bands, engine):
    assert five_bands.remove_band(9) is None
    assert engine.writes == []


def test_freed_slot_is_reused_without_collision(five_bands, engine):
    five_bands.remove_band(2)
    band = five_bands.add_band(2000.0)
    assert band.index == 2
    slots = [b.index for b in five_bands.bands]
    assert len(slots) == len(set(slots))
    # Later bands keep their own slots after the removal.
    five_bands.update_band(2, gain=3.0)
    assert engine.get_param(3, 1, flat_index(3, ParamOffset.GAIN)) == 3.0


def test_update_syncs_every_offset_with_clamping(five_bands, engine):
    five_bands.update_band(1, gain=45.0, q=0.01, shape=FilterShape.HIGH_SHELF)
    band = five_bands.get(1)
    assert band.gain == 30.0
    assert band.q == 0.1
    assert [index for index in engine.written_indices()] == list(range(11, 21))
    assert engine.get_param(3, 1, 12) == 30.0
    assert engine.get_param(3, 1, 15) == 2.0


def test_update_rejects_unknown_fields(five_bands):
    with pytest.raises(ValueError):
        five_bands.update_band(0, colour="red")


def test_toggle_enabled(five_bands, engine):
    five_bands.toggle_enabled(0)
    assert not five_bands.get(0).enabled
    assert engine.get_param(3, 1, 3) == 0.0
    five_bands.toggle_enabled(0)
    assert engine.get_param(3, 1, 3) == 1.0


def test_reset_all_clears_every_slot(five_bands, engine, changes):
    five_bands.set_output_gain(4.0)
    engine.clear_log()
    changes.clear()
    five_bands.reset_all()
    assert len(engine.writes) == MAX_BANDS * 2 + 1
    assert engine.writes[-1] == (3, 1, OUTPUT_GAIN_INDEX, 0.0)
    assert len(five_bands) == 0
    assert five_bands.selected_index is None
    assert five_bands.output_gain == 0.0
    assert changes == [1]


def test_not_ready_link_makes_mutations_noops(engine, changes):
    link = EngineLink(track_id=0)
    registry = BandRegistry(link, on_settings_changed=lambda: changes.append(1))
    assert registry.add_band(1000.0) is None
    registry.reset_all()
    registry.set_output_gain(3.0)
    assert len(registry) == 0
    assert changes == []


def test_detached_link_leaves_bands_untouched(five_bands, link, engine):
    link.set_ready(False)
    assert five_bands.update_band(0, gain=12.0) is None
    assert five_bands.remove_band(0) is None
    assert five_bands.get(0).gain == 0.0
    assert len(five_bands) == 5
    assert engine.writes == []


def test_select_ignores_invalid_positions(five_bands):
    five_bands.select(2)
    five_bands.select(42)
    assert five_bands.selected_index == 2
    five_bands.select(None)
    assert five_bands.selected is None


def test_output_and_auto_gain(registry, engine):
    registry.set_output_gain(40.0)
    registry.set_auto_gain(True)
    assert registry.output_gain == 24.0
    assert engine.get_param(3, 1, OUTPUT_GAIN_INDEX) == 24.0
    assert engine.get_param(3, 1, AUTO_GAIN_INDEX) == 1.0


def test_global_placement_applies_to_new_bands(registry):
    registry.global_placement = Placement.MID
    assert registry.add_band(100.0).placement is Placement.MID
    assert registry.add_band(200.0, placement=Placement.SIDE).placement is Placement.SIDE


def test_ab_recall_restores_bands_and_resends(five_bands, engine):
    five_bands.store_state("A")
    five_bands.update_band(0, gain=9.0)
    five_bands.remove_band(4)
    five_bands.store_state("B")
    engine.clear_log()

    assert five_bands.recall_state("A")
    assert len(five_bands) == 5
    assert five_bands.get(0).gain == 0.0
    assert engine.get_param(3, 1, flat_index(4, ParamOffset.ENABLED)) == 1.0
    assert five_bands.recall_state("B")
    assert len(five_bands) == 4
    assert engine.get_param(3, 1, flat_index(4, ParamOffset.ENABLED)) == 0.0
    assert not five_bands.recall_state("C")


def test_snapshots_are_independent_copies(five_bands):
    five_bands.store_state("A")
    five_bands.copy_state("A", "B")
    five_bands.update_band(0, gain=5.0)
    five_bands.recall_state("B")
    assert five_bands.get(0).gain == 0.0
    assert five_bands.has_state("B")


def test_load_from_engine_rebuilds_live_slots(engine, link):
    def put(slot, offset, value):
        engine.set_param(3, 1, flat_index(slot, offset), value)

    put(0, ParamOffset.FREQ, 120.0)
    put(0, ParamOffset.ENABLED, 1.0)
    put(0, ParamOffset.GAIN, -4.0)
    put(0, ParamOffset.Q, 2.0)
    put(0, ParamOffset.SHAPE, 1.0)
    put(7, ParamOffset.FREQ, 5000.0)  # disabled but configured
    put(7, ParamOffset.SHAPE, 42.0)
    engine.set_param(3, 1, OUTPUT_GAIN_INDEX, -2.0)

    registry = BandRegistry(link)
    assert registry.load_from_engine() == 2
    first, second = registry.bands
    assert (first.index, first.freq, first.gain, first.q) == (0, 120.0, -4.0, 2.0)
    assert first.shape is FilterShape.LOW_SHELF
    assert second.index == 7 and not second.enabled
    assert second.shape is FilterShape.BRICKWALL
    assert registry.output_gain == -2.0
    assert registry.selected_index == 0
    # The next add takes the lowest free slot.
    assert registry.add_band(800.0).index == 1


def test_nan_edits_keep_current_values(five_bands, engine):
    five_bands.update_band(0, freq=float("nan"), gain=float("nan"), q=float("nan"))
    band = five_bands.get(0)
    assert (band.freq, band.gain, band.q) == (100.0, 0.0, 1.0)
    assert engine.get_param(3, 1, 0) == 100.0


@pytest.mark.parametrize(
    "edit",
    [
        lambda reg: reg.update_band(1, gain=3.0),
        lambda reg: reg.toggle_enabled(1),
        lambda reg: reg.remove_band(1),
        lambda reg: reg.set_output_gain(2.0),
        lambda reg: reg.set_auto_gain(True),
        lambda reg: reg.set_solo(1),
    ],
)
def test_every_accepted_edit_notifies_once(five_bands, changes, edit):
    changes.clear()
    edit(five_bands)
    assert changes == [1]


def test_recall_notifies(five_bands, changes):
    five_bands.store_state("A")
    changes.clear()
    five_bands.recall_state("A")
    assert changes == [1]


def test_rejected_edits_do_not_notify(five_bands, changes):
    changes.clear()
    five_bands.update_band(42, gain=1.0)
    five_bands.remove_band(42)
    five_bands.recall_state("missing")
    assert changes == []


def test_solo_is_exclusive_and_written_by_slot(five_bands, engine):
    five_bands.set_solo(1)
    five_bands.set_solo(3)
    assert [b.solo for b in five_bands.bands] == [False, False, False, True, False]
    assert five_bands.soloed_index == 3
    assert engine.get_param(3, 1, SOLO_BAND_INDEX) == 3.0

    five_bands.set_solo(3, solo=False)
    assert five_bands.soloed_index is None
    assert engine.get_param(3, 1, SOLO_BAND_INDEX) == -1.0


def test_solo_uses_engine_slot_not_list_position(five_bands, engine):
    five_bands.remove_band(0)
    five_bands.set_solo(0)
    assert engine.get_param(3, 1, SOLO_BAND_INDEX) == 1.0


def test_removing_or_resetting_soloed_band_clears_solo(five_bands, engine):
    five_bands.set_solo(2)
    five_bands.remove_band(2)
    assert engine.get_param(3, 1, SOLO_BAND_INDEX) == -1.0

    five_bands.set_solo(0)
    five_bands.reset_all()
    assert engine.get_param(3, 1, SOLO_BAND_INDEX) == -1.0


def test_solo_rejects_unknown_position(five_bands, engine):
    assert five_bands.set_solo(9) is None
    assert engine.writes == []


def test_snapshot_carries_solo_and_placement(five_bands, engine):
    five_bands.global_placement = Placement.SIDE
    five_bands.set_solo(4)
    five_bands.store_state("A")
    five_bands.global_placement = Placement.LEFT
    five_bands.set_solo(None)

    five_bands.recall_state("A")
    assert five_bands.global_placement is Placement.SIDE
    assert five_bands.soloed_index == 4
    assert engine.get_param(3, 1, SOLO_BAND_INDEX) == 4.0
