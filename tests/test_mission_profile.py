"""
tests/test_mission_profile.py
=============================
Mobile Base Battery Sizing — Unit Tests for the Duty-Cycle Mission Profile

Covers operating-state power levels, phase table validation and the
half-open sampling convention of mission_profile.py.

Reference timeline (battsizing/config.py): 300 s sampled at 0.1 s → 3001
samples; phase boundaries at 10, 65, 70, 80, 108, 110, 111, 115, 130, 298 s.
"""

import pytest

from battsizing.catalog import DriveTrain, MissionPhase, OperatingState
from battsizing.config import (
    DRIVE_TRAIN,
    MISSION_DURATION_S,
    MISSION_PHASES,
    PROFILE_STEP_S,
)
from battsizing.errors import ProfileError, ProfileGapError, ProfileOverlapError
from battsizing.mission_profile import (
    MissionProfileBuilder,
    build_power_profile,
    compute_logic_base_power,
    compute_sample_count,
    compute_state_powers,
    validate_phases,
)

IDLE = OperatingState.IDLE
DRIVE = OperatingState.DRIVE
STALL = OperatingState.STALL


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def state_powers():
    """Distinct, easy-to-recognise power per state."""
    return {
        OperatingState.IDLE:       10.0,
        OperatingState.PERCEPTION: 22.0,
        OperatingState.DRIVE:      48.0,
        OperatingState.AGGRESSIVE: 130.0,
        OperatingState.STALL:      274.0,
    }


@pytest.fixture
def reference_profile(state_powers):
    return build_power_profile(MISSION_PHASES, state_powers, MISSION_DURATION_S, PROFILE_STEP_S)


def _phase_at(t_s):
    return next(p for p in MISSION_PHASES if p.contains(t_s))


# ---------------------------------------------------------------------------
# Operating states
# ---------------------------------------------------------------------------

class TestOperatingStates:
    """P_state = P_base + N_motor · I_state · V_motor"""

    def test_logic_base_removes_driving_motors(self):
        base = compute_logic_base_power(48.920784, DRIVE_TRAIN)
        assert base == pytest.approx(48.920784 - 4 * 0.8 * 12.0, rel=1e-12)

    def test_state_powers(self):
        powers = compute_state_powers(10.0, DRIVE_TRAIN)
        assert powers[OperatingState.IDLE] == pytest.approx(10.0)
        assert powers[OperatingState.PERCEPTION] == pytest.approx(22.0)
        assert powers[OperatingState.DRIVE] == pytest.approx(10.0 + 38.4)
        assert powers[OperatingState.AGGRESSIVE] == pytest.approx(10.0 + 120.0)
        assert powers[OperatingState.STALL] == pytest.approx(10.0 + 264.0)

    def test_every_state_defined(self):
        assert set(compute_state_powers(0.0, DRIVE_TRAIN)) == set(OperatingState)

    def test_states_ordered_by_motor_effort(self):
        p = compute_state_powers(5.0, DRIVE_TRAIN)
        assert p[IDLE] < p[DRIVE] < p[OperatingState.AGGRESSIVE] < p[STALL]

    def test_drive_at_nominal_reproduces_bus_nominal(self):
        drive = DriveTrain(2, 24.0, 1.0, 3.0, 6.0)
        base = compute_logic_base_power(100.0, drive)
        assert compute_state_powers(base, drive)[DRIVE] == pytest.approx(100.0)


# ---------------------------------------------------------------------------
# Phase validation
# ---------------------------------------------------------------------------

class TestPhaseValidation:
    """Phases must exactly partition [0, T]."""

    def test_reference_mission_is_valid(self):
        validate_phases(MISSION_PHASES, MISSION_DURATION_S)

    def test_gap_between_phases(self):
        phases = [MissionPhase(0, 10, IDLE), MissionPhase(12, 20, DRIVE)]
        with pytest.raises(ProfileGapError, match="Gap"):
            validate_phases(phases, 20.0)

    def test_late_first_phase_is_gap(self):
        with pytest.raises(ProfileGapError):
            validate_phases([MissionPhase(1, 20, IDLE)], 20.0)

    def test_short_timeline_is_gap(self):
        with pytest.raises(ProfileGapError):
            validate_phases([MissionPhase(0, 15, IDLE)], 20.0)

    def test_empty_phase_list_is_gap(self):
        with pytest.raises(ProfileGapError):
            validate_phases([], 20.0)

    def test_overlapping_phases(self):
        phases = [MissionPhase(0, 10, IDLE), MissionPhase(8, 20, DRIVE)]
        with pytest.raises(ProfileOverlapError, match="before the previous phase ends"):
            validate_phases(phases, 20.0)

    def test_overrunning_last_phase(self):
        with pytest.raises(ProfileOverlapError, match="past the mission end"):
            validate_phases([MissionPhase(0, 25, IDLE)], 20.0)

    def test_profile_errors_share_base(self):
        assert issubclass(ProfileGapError, ProfileError)
        assert issubclass(ProfileOverlapError, ProfileError)
        assert issubclass(ProfileError, ValueError)

    def test_builder_validates_on_construction(self):
        with pytest.raises(ProfileGapError):
            MissionProfileBuilder([MissionPhase(0, 5, IDLE)], 10.0)

    def test_inverted_phase_rejected(self):
        with pytest.raises(ValueError, match="after its start"):
            MissionPhase(10, 10, IDLE)

    def test_negative_start_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            MissionPhase(-1, 10, IDLE)

    def test_non_positive_duration_rejected(self):
        with pytest.raises(ValueError, match="duration"):
            validate_phases([MissionPhase(0, 10, IDLE)], 0.0)


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------

class TestSampling:
    """t_k = k · dt, half-open phase lookup, terminal sample forced."""

    def test_reference_sample_count(self, reference_profile):
        assert len(reference_profile) == 3001
        assert compute_sample_count(MISSION_DURATION_S, PROFILE_STEP_S) == 3001

    @pytest.mark.parametrize("duration, step, expected", [
        (10.0, 1.0, 11),
        (10.0, 3.0, 4),
        (1.0, 0.25, 5),
        (300.0, 0.1, 3001),
    ])
    def test_sample_count_formula(self, duration, step, expected):
        assert compute_sample_count(duration, step) == expected

    def test_times_are_uniform(self, reference_profile):
        assert reference_profile.time_s[0] == 0.0
        assert reference_profile.time_s[100] == pytest.approx(10.0)
        assert reference_profile.time_s[-1] == pytest.approx(300.0)

    def test_boundary_takes_later_phase(self, reference_profile, state_powers):
        # t = 10.0 s is the IDLE -> DRIVE boundary
        assert reference_profile.power_w[99] == state_powers[IDLE]
        assert reference_profile.power_w[100] == state_powers[DRIVE]

    def test_stall_transient_boundaries(self, reference_profile, state_powers):
        assert reference_profile.power_w[1100] == state_powers[STALL]   # t = 110.0
        assert reference_profile.power_w[1109] == state_powers[STALL]   # t = 110.9
        assert reference_profile.power_w[1110] == state_powers[OperatingState.AGGRESSIVE]

    def test_terminal_sample_forced_to_last_phase(self, state_powers):
        phases = [MissionPhase(0, 5, IDLE), MissionPhase(5, 10, STALL)]
        profile = build_power_profile(phases, state_powers, 10.0, 1.0)
        assert profile.time_s[-1] == 10.0
        assert profile.power_w[-1] == state_powers[STALL]

    def test_every_sample_matches_its_phase(self, reference_profile, state_powers):
        for t, p in zip(reference_profile.time_s[:-1], reference_profile.power_w[:-1]):
            assert p == state_powers[_phase_at(t).state]

    def test_single_phase_profile_is_constant(self):
        profile = build_power_profile([MissionPhase(0, 10, IDLE)], {IDLE: 100.0}, 10.0, 1.0)
        assert profile.power_w == (100.0,) * 11

    def test_current_conversion(self):
        profile = build_power_profile([MissionPhase(0, 10, IDLE)], {IDLE: 100.0}, 10.0, 1.0)
        assert profile.current_a(10.0) == [10.0] * 11

    def test_missing_state_power_raises(self):
        with pytest.raises(KeyError):
            build_power_profile([MissionPhase(0, 10, DRIVE)], {IDLE: 1.0}, 10.0, 1.0)

    def test_sample_limit_enforced(self):
        with pytest.raises(ValueError, match="above the limit"):
            compute_sample_count(1000.0, 0.1, max_samples=100)

    def test_step_guards(self):
        with pytest.raises(ValueError, match="positive"):
            compute_sample_count(10.0, 0.0)
        with pytest.raises(ValueError, match="exceeds"):
            compute_sample_count(10.0, 20.0)


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

class TestMissionProfileBuilder:

    def test_build_matches_function(self, state_powers, reference_profile):
        builder = MissionProfileBuilder(MISSION_PHASES, MISSION_DURATION_S)
        assert builder.build(state_powers, PROFILE_STEP_S) == reference_profile

    def test_time_in_state_covers_mission(self):
        builder = MissionProfileBuilder(MISSION_PHASES, MISSION_DURATION_S)
        totals = builder.time_in_state()
        assert sum(totals.values()) == pytest.approx(MISSION_DURATION_S)
        assert totals[DRIVE] == pytest.approx(55 + 28 + 168)
        assert totals[STALL] == pytest.approx(3.0)

    def test_properties(self):
        builder = MissionProfileBuilder(MISSION_PHASES, MISSION_DURATION_S)
        assert builder.phases == MISSION_PHASES
        assert builder.total_duration_s == MISSION_DURATION_S
