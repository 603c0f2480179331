"""
tests/test_sizing_pipeline.py
=============================
Mobile Base Battery Sizing — End-to-End Sizing Run

Reference mobile base (battsizing/config.py), hand-computed:
    Battery drain nominal   48.92 W  (4.08 A)
    Battery drain peak     292.55 W  (24.38 A)
    Logic base power        10.52 W
    Mission energy           ≈ 0.3481 Ah  (trapezoid adds dt/2 · (P_stall − P_idle))
    Safe requirement         ≈ 0.4352 Ah
    Pack                     4S2P, current-limited, 0.44 kg, 72 Wh
    Main fuse                30 A
"""

import dataclasses

import pytest

from battsizing.catalog import Component, MissionPhase, OperatingState
from battsizing.errors import (
    InvalidCatalogEntry,
    ProfileGapError,
    ProfileOverlapError,
    RatingExceededWarning,
)
from battsizing.pipeline import SizingInputs, run_sizing


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="module")
def result():
    return run_sizing()


@pytest.fixture
def inputs():
    return SizingInputs.from_config()


# ---------------------------------------------------------------------------
# Reference configuration
# ---------------------------------------------------------------------------

class TestReferenceRun:

    def test_battery_drain(self, result):
        assert result.bus.nominal_power_w == pytest.approx(48.9208, abs=1e-4)
        assert result.bus.nominal_current_a == pytest.approx(4.0767, abs=1e-4)
        assert result.bus.peak_current_a == pytest.approx(24.3794, abs=1e-4)

    def test_logic_base_and_states(self, result):
        assert result.logic_base_w == pytest.approx(10.5208, abs=1e-4)
        assert result.state_powers[OperatingState.DRIVE] == pytest.approx(result.bus.nominal_power_w)
        assert result.state_powers[OperatingState.STALL] == pytest.approx(result.logic_base_w + 264.0)

    def test_profile_shape(self, result):
        assert len(result.profile) == 3001
        assert result.profile.power_w[0] == result.state_powers[OperatingState.IDLE]
        assert result.profile.power_w[-1] == result.state_powers[OperatingState.STALL]

    def test_mission_energy(self, result):
        exact_ws = (
            result.logic_base_w * 300.0
            + 251.0 * 38.4      # drive
            + 11.0 * 120.0      # aggressive
            + 3.0 * 264.0       # stall
            + 10.0 * 12.0       # perception spike
        )
        trapezoid_ws = exact_ws + 0.5 * 0.1 * 264.0
        assert result.energy.consumed_ah == pytest.approx(trapezoid_ws / 12.0 / 3600.0, rel=1e-9)
        assert result.energy.consumed_ah == pytest.approx(0.3481, abs=1e-4)

    def test_required_capacity(self, result):
        assert result.energy.required_capacity_ah == pytest.approx(result.energy.consumed_ah / 0.8)
        assert result.energy.cumulative_ah[-1] == pytest.approx(result.energy.consumed_ah)

    def test_pack(self, result):
        pack = result.pack
        assert pack.designation == "4S2P"
        assert pack.capacity_parallel_count == 1
        assert pack.current_parallel_count == 2
        assert pack.pack_mass_kg == pytest.approx(0.4416)
        assert pack.pack_energy_wh == pytest.approx(72.0)
        assert pack.max_continuous_draw_a == pytest.approx(30.0)
        assert pack.estimated_runtime_min == pytest.approx(70.64, abs=0.01)

    def test_fuse(self, result):
        assert result.fuse.rating_a == 30.0
        assert result.fuse.exceeded_catalog is False
        assert result.fuse.peak_current_a == result.bus.peak_current_a

    def test_breakdowns(self, result):
        assert set(result.subsystem_power) == {"actuation", "perception", "control"}
        assert len(result.component_power) == 11
        assert [r.voltage for r in result.rails] == [12.0, 5.0, 3.3]

    def test_default_inputs_match_config(self, result, inputs):
        assert result.inputs == inputs

    def test_rerun_is_identical(self, result):
        again = run_sizing()
        assert again.energy.consumed_ah == result.energy.consumed_ah
        assert again.pack == result.pack
        assert again.fuse == result.fuse


# ---------------------------------------------------------------------------
# Invalid inputs stop the run
# ---------------------------------------------------------------------------

class TestFailures:

    def test_unknown_rail_stops_run(self, inputs):
        bad = dataclasses.replace(
            inputs, components=inputs.components + (Component("Servo", 7.4, 1, 0.5, 1.0),)
        )
        with pytest.raises(InvalidCatalogEntry):
            run_sizing(bad)

    def test_gap_stops_run(self, inputs):
        bad = dataclasses.replace(inputs, mission_phases=inputs.mission_phases[:-1])
        with pytest.raises(ProfileGapError):
            run_sizing(bad)

    def test_overlap_stops_run(self, inputs):
        phases = inputs.mission_phases[:-1] + (MissionPhase(297.0, 300.0, OperatingState.STALL),)
        with pytest.raises(ProfileOverlapError):
            run_sizing(dataclasses.replace(inputs, mission_phases=phases))

    def test_fuse_shortfall_is_non_fatal(self, inputs):
        small = dataclasses.replace(inputs, standard_fuses_a=(5.0, 10.0, 20.0))
        with pytest.warns(RatingExceededWarning):
            result = run_sizing(small)
        assert result.fuse.exceeded_catalog is True
        assert result.fuse.rating_a == 20.0
        assert result.pack.designation == "4S2P"

    def test_longer_mission_needs_more_capacity(self, inputs):
        phases = inputs.mission_phases[:-1] + (
            MissionPhase(298.0, 3600.0, OperatingState.DRIVE),
        )
        long_run = dataclasses.replace(inputs, mission_phases=phases, mission_duration_s=3600.0)
        result = run_sizing(long_run)
        assert result.pack.capacity_parallel_count >= 1
        assert result.energy.required_capacity_ah > 4.0
        assert result.pack.parallel_count == max(
            result.pack.capacity_parallel_count, result.pack.current_parallel_count
        )
