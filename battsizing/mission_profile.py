"""
battsizing/mission_profile.py
=============================
Mobile Base Battery Sizing — Duty-Cycle Mission Profile

Expands named operating states and a timed phase table into a uniformly
sampled battery power profile.

Sampling convention:
    - Sample k sits at t_k = k · dt, for k = 0 … floor(T / dt).
    - A sample takes the power of the phase whose half-open interval
      [start, end) contains it, so a sample on a phase boundary belongs to
      the later phase.
    - The terminal sample is forced to the last phase's value; the half-open
      convention would otherwise leave t = T uncovered.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence

from battsizing.catalog import DriveTrain, MissionPhase, OperatingState, PowerProfile
from battsizing.config import MAX_PROFILE_SAMPLES
from battsizing.errors import ProfileGapError, ProfileOverlapError

logger = logging.getLogger(__name__)

# Absolute tolerance for phase boundary comparisons [s].
TIME_TOLERANCE_S: float = 1e-9


# ---------------------------------------------------------------------------
# Operating states
# ---------------------------------------------------------------------------

def compute_logic_base_power(battery_nominal_w: float, drive: DriveTrain) -> float:
    """Battery power with the drive motors switched off.

    Equation:
        P_base = P_batt,nom − N_motor · I_drive · V_motor

    The nominal battery figure already contains the motors at their steady
    driving current; removing that term leaves converter-reflected logic,
    compute and motor-driver power.
    """
    return battery_nominal_w - drive.motor_power_w(drive.drive_current_a)


def compute_state_powers(logic_base_w: float, drive: DriveTrain) -> dict[OperatingState, float]:
    """Battery power of every operating state [W].

    Example:
        >>> drive = DriveTrain(4, 12.0, 0.8, 2.5, 5.5, perception_spike_w=12.0)
        >>> compute_state_powers(10.0, drive)[OperatingState.DRIVE]
        48.4
    """
    return {
        OperatingState.IDLE:       logic_base_w,
        OperatingState.PERCEPTION: logic_base_w + drive.perception_spike_w,
        OperatingState.DRIVE:      logic_base_w + drive.motor_power_w(drive.drive_current_a),
        OperatingState.AGGRESSIVE: logic_base_w + drive.motor_power_w(drive.aggressive_current_a),
        OperatingState.STALL:      logic_base_w + drive.motor_power_w(drive.stall_current_a),
    }


# ---------------------------------------------------------------------------
# Phase validation
# ---------------------------------------------------------------------------

def validate_phases(phases: Sequence[MissionPhase], total_duration_s: float) -> None:
    """Check that the phases exactly partition ``[0, total_duration_s]``.

    Raises:
        ValueError:          If ``total_duration_s`` is not positive.
        ProfileGapError:     If any stretch of the mission has no phase,
                             including an empty phase list.
        ProfileOverlapError: If a phase starts before the previous one ends,
                             or the last phase runs past the mission end.
    """
    if total_duration_s <= 0.0:
        raise ValueError(
            f"Mission duration must be positive; received total_duration_s={total_duration_s!r}"
        )
    if not phases:
        raise ProfileGapError(f"No phases cover the mission [0, {total_duration_s!r}] s")

    expected_start = 0.0
    for index, phase in enumerate(phases):
        if phase.start_s > expected_start + TIME_TOLERANCE_S:
            raise ProfileGapError(
                f"Gap in mission timeline: nothing covers "
                f"[{expected_start!r}, {phase.start_s!r}) s before phase {index}"
            )
        if phase.start_s < expected_start - TIME_TOLERANCE_S:
            raise ProfileOverlapError(
                f"Phase {index} starts at {phase.start_s!r} s, before the "
                f"previous phase ends at {expected_start!r} s"
            )
        expected_start = phase.end_s

    if expected_start < total_duration_s - TIME_TOLERANCE_S:
        raise ProfileGapError(
            f"Gap in mission timeline: nothing covers "
            f"[{expected_start!r}, {total_duration_s!r}] s"
        )
    if expected_start > total_duration_s + TIME_TOLERANCE_S:
        raise ProfileOverlapError(
            f"Last phase ends at {expected_start!r} s, past the mission end "
            f"at {total_duration_s!r} s"
        )


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------

def compute_sample_count(
    total_duration_s: float,
    dt_s: float,
    max_samples: int = MAX_PROFILE_SAMPLES,
) -> int:
    """Number of profile samples, floor(T / dt) + 1.

    Raises:
        ValueError: If ``dt_s`` is not positive, exceeds the duration, or the
                    sample count would exceed ``max_samples``.
    """
    if dt_s <= 0.0:
        raise ValueError(f"Sampling step must be positive; received dt_s={dt_s!r}")
    if dt_s > total_duration_s:
        raise ValueError(
            f"Sampling step dt_s={dt_s!r} exceeds total_duration_s={total_duration_s!r}"
        )
    # 0.3 / 0.1 == 2.9999999999999996
    n_samples = math.floor(total_duration_s / dt_s + TIME_TOLERANCE_S) + 1
    if n_samples > max_samples:
        raise ValueError(
            f"Mission profile needs {n_samples} samples, above the limit of {max_samples}"
        )
    return n_samples


def build_power_profile(
    phases: Sequence[MissionPhase],
    state_powers: Mapping[OperatingState, float],
    total_duration_s: float,
    dt_s: float,
) -> PowerProfile:
    """Sample the phase table into a battery power profile.

    Args:
        phases:            Ordered phases partitioning the mission.
        state_powers:      Battery power of each operating state [W].
        total_duration_s:  Mission length [s].
        dt_s:              Sampling step [s].

    Returns:
        :class:`PowerProfile` with floor(T / dt) + 1 samples.

    Raises:
        ProfileGapError, ProfileOverlapError: If the phases do not partition
                                              the mission.
        KeyError: If a phase uses a state missing from ``state_powers``.
    """
    validate_phases(phases, total_duration_s)
    n_samples = compute_sample_count(total_duration_s, dt_s)

    times: list[float] = []
    powers: list[float] = []
    index = 0
    last = len(phases) - 1
    for k in range(n_samples):
        t = round(k * dt_s, 10)   # avoid floating-point drift at phase boundaries
        while index < last and t >= phases[index].end_s:
            index += 1
        times.append(t)
        powers.append(state_powers[phases[index].state])

    powers[-1] = state_powers[phases[-1].state]

    logger.debug("built mission profile: %d samples at dt=%.3f s", n_samples, dt_s)
    return PowerProfile(time_s=tuple(times), power_w=tuple(powers), dt_s=dt_s)


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

class MissionProfileBuilder:
    """Validated mission timeline that can be sampled into power profiles.

    The phase table is checked once, at construction, so an invalid mission
    fails before any power is computed.

    Args:
        phases:            Ordered mission phases.
        total_duration_s:  Mission length [s].

    Raises:
        ProfileGapError, ProfileOverlapError: If the phases do not partition
                                              ``[0, total_duration_s]``.
    """

    def __init__(self, phases: Sequence[MissionPhase], total_duration_s: float) -> None:
        validate_phases(phases, total_duration_s)
        self._phases: tuple[MissionPhase, ...] = tuple(phases)
        self._total_duration_s: float = total_duration_s

    def build(self, state_powers: Mapping[OperatingState, float], dt_s: float) -> PowerProfile:
        """Sample the mission at ``dt_s`` using the given state powers."""
        return build_power_profile(self._phases, state_powers, self._total_duration_s, dt_s)

    def time_in_state(self) -> dict[OperatingState, float]:
        """Total mission time spent in each operating state [s]."""
        totals: dict[OperatingState, float] = {}
        for phase in self._phases:
            totals[phase.state] = totals.get(phase.state, 0.0) + phase.duration_s
        return totals

    @property
    def phases(self) -> tuple[MissionPhase, ...]:
        return self._phases

    @property
    def total_duration_s(self) -> float:
        return self._total_duration_s
