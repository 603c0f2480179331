"""
battsizing/catalog.py
=====================
Mobile Base Battery Sizing — Typed Catalog Records

Every row of the component catalog and the mission phase table is an
explicit record instead of a positional matrix column.  Records are frozen
and validate themselves on construction, so an inconsistent catalog fails
before any power is computed.

Units: volts [V], amperes [A], watts [W], seconds [s], ampere-hours [Ah],
kilograms [kg].
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from battsizing.errors import InvalidCatalogEntry


# ---------------------------------------------------------------------------
# Electrical loads
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Component:
    """One electrical load in the robot's component catalog.

    Attributes:
        name:                    Human-readable label (report and plots only).
        rail_voltage:            Supply rail the load is connected to [V].
        quantity:                Number of identical units on the rail.
        nominal_unit_current_a:  Typical current drawn by one unit [A].
        max_unit_current_a:      Worst-case current drawn by one unit [A].
        subsystem:               Functional group used by the breakdown report,
                                 e.g. ``"actuation"`` or ``"perception"``.

    Raises:
        InvalidCatalogEntry: If the quantity is not a positive integer, a
                             current is negative, or nominal exceeds max.
    """
    name:                   str
    rail_voltage:           float
    quantity:               int
    nominal_unit_current_a: float
    max_unit_current_a:     float
    subsystem:              str = "control"

    def __post_init__(self) -> None:
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity <= 0:
            raise InvalidCatalogEntry(
                f"{self.name}: quantity must be a positive integer; "
                f"received quantity={self.quantity!r}"
            )
        if self.rail_voltage <= 0.0:
            raise InvalidCatalogEntry(
                f"{self.name}: rail voltage must be positive; "
                f"received rail_voltage={self.rail_voltage!r}"
            )
        if self.nominal_unit_current_a < 0.0 or self.max_unit_current_a < 0.0:
            raise InvalidCatalogEntry(
                f"{self.name}: currents must be non-negative; received "
                f"nominal={self.nominal_unit_current_a!r}, max={self.max_unit_current_a!r}"
            )
        if self.nominal_unit_current_a > self.max_unit_current_a:
            raise InvalidCatalogEntry(
                f"{self.name}: nominal current {self.nominal_unit_current_a!r} A "
                f"exceeds max current {self.max_unit_current_a!r} A"
            )

    @property
    def nominal_current_a(self) -> float:
        """Total nominal current of all units [A]."""
        return self.quantity * self.nominal_unit_current_a

    @property
    def max_current_a(self) -> float:
        """Total worst-case current of all units [A]."""
        return self.quantity * self.max_unit_current_a

    @property
    def nominal_power_w(self) -> float:
        return self.rail_voltage * self.nominal_current_a

    @property
    def peak_power_w(self) -> float:
        return self.rail_voltage * self.max_current_a


@dataclass(frozen=True)
class RailPower:
    """Aggregate load on one supply rail, before any converter losses."""
    voltage:         float
    nominal_power_w: float
    peak_power_w:    float


@dataclass(frozen=True)
class ConverterHop:
    """One DC/DC conversion stage between two rails.

    Power drawn on ``target_voltage`` appears on ``source_voltage`` divided
    by ``efficiency``.

    Raises:
        ValueError: If ``efficiency`` is outside (0.0, 1.0].
    """
    source_voltage: float
    target_voltage: float
    efficiency:     float

    def __post_init__(self) -> None:
        if not (0.0 < self.efficiency <= 1.0):
            raise ValueError(
                f"Converter efficiency must be in (0.0, 1.0]; "
                f"received efficiency={self.efficiency!r}"
            )


@dataclass(frozen=True)
class BatteryBus:
    """Load seen by the battery after all converter losses.

    Nominal and peak figures are reflected independently from their own
    component currents; peak is not a scaled copy of nominal.

    Attributes:
        system_voltage:     Battery bus voltage [V].
        nominal_power_w:    Typical battery drain [W].
        peak_power_w:       Worst-case battery drain [W].
        nominal_current_a:  Typical battery current [A].
        peak_current_a:     Worst-case battery current [A].
        rails:              Per-rail load the bus was derived from.
    """
    system_voltage:    float
    nominal_power_w:   float
    peak_power_w:      float
    nominal_current_a: float
    peak_current_a:    float
    rails:             tuple[RailPower, ...] = ()


# ---------------------------------------------------------------------------
# Mission description
# ---------------------------------------------------------------------------

class OperatingState(Enum):
    """Named power levels of the mobile base."""
    IDLE = "idle"               # motors off
    DRIVE = "drive"             # steady driving
    AGGRESSIVE = "aggressive"   # strafing / hard acceleration
    STALL = "stall"             # transient only
    PERCEPTION = "perception"   # motors off, compute spike


@dataclass(frozen=True)
class DriveTrain:
    """Motor-current term of each operating state.

    Attributes:
        motor_count:          Number of drive motors.
        rail_voltage:         Motor rail voltage [V].
        drive_current_a:      Per-motor current while driving [A].
        aggressive_current_a: Per-motor current during aggressive manoeuvres [A].
        stall_current_a:      Per-motor stall current [A].
        perception_spike_w:   Extra compute power during perception [W].
    """
    motor_count:          int
    rail_voltage:         float
    drive_current_a:      float
    aggressive_current_a: float
    stall_current_a:      float
    perception_spike_w:   float = 0.0

    def motor_power_w(self, per_motor_current_a: float) -> float:
        """Total motor power at the given per-motor current [W]."""
        return self.motor_count * per_motor_current_a * self.rail_voltage


@dataclass(frozen=True)
class MissionPhase:
    """A timed slice of the mission spent in one operating state.

    The phase covers the half-open interval ``[start_s, end_s)``.

    Raises:
        ValueError: If ``start_s`` is negative or ``end_s`` ≤ ``start_s``.
    """
    start_s: float
    end_s:   float
    state:   OperatingState
    label:   str = ""

    def __post_init__(self) -> None:
        if self.start_s < 0.0:
            raise ValueError(
                f"Phase start must be non-negative; received start_s={self.start_s!r}"
            )
        if self.end_s <= self.start_s:
            raise ValueError(
                f"Phase end must be after its start; received "
                f"start_s={self.start_s!r}, end_s={self.end_s!r}"
            )

    @property
    def duration_s(self) -> float:
        return self.end_s - self.start_s

    def contains(self, t_s: float) -> bool:
        return self.start_s <= t_s < self.end_s


@dataclass(frozen=True)
class PowerProfile:
    """Uniformly sampled battery power over the mission.

    Attributes:
        time_s:   Sample times [s], ``time_s[k] == k · dt_s``.
        power_w:  Battery power at each sample [W].
        dt_s:     Fixed sampling step [s].
    """
    time_s:  tuple[float, ...]
    power_w: tuple[float, ...]
    dt_s:    float

    def __len__(self) -> int:
        return len(self.time_s)

    def current_a(self, system_voltage: float) -> list[float]:
        """Battery current at each sample [A]."""
        if system_voltage <= 0.0:
            raise ValueError(
                f"System voltage must be positive; received system_voltage={system_voltage!r}"
            )
        return [p / system_voltage for p in self.power_w]


# ---------------------------------------------------------------------------
# Cells, packs and protection
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Cell:
    """Specification of the cell the pack is built from.

    Attributes:
        name:                      Cell designation.
        voltage_v:                 Nominal cell voltage [V].
        capacity_ah:               Rated capacity [Ah].
        max_continuous_current_a:  Continuous discharge limit [A].
        mass_kg:                   Cell mass [kg].
        usable_fraction:           Allowed depth of discharge, in (0.0, 1.0].

    Raises:
        ValueError: If any rating is non-positive or the usable fraction is
                    outside (0.0, 1.0].
    """
    name:                     str
    voltage_v:                float
    capacity_ah:              float
    max_continuous_current_a: float
    mass_kg:                  float
    usable_fraction:          float

    def __post_init__(self) -> None:
        for attr in ("voltage_v", "capacity_ah", "max_continuous_current_a", "mass_kg"):
            value = getattr(self, attr)
            if value <= 0.0:
                raise ValueError(f"Cell {attr} must be positive; received {attr}={value!r}")
        if not (0.0 < self.usable_fraction <= 1.0):
            raise ValueError(
                f"Depth of discharge must be in (0.0, 1.0]; "
                f"received usable_fraction={self.usable_fraction!r}"
            )


@dataclass(frozen=True)
class PackConfig:
    """Series/parallel arrangement chosen for the mission.

    Attributes:
        series_count:            Cells in series (voltage constraint).
        parallel_count:          Cells in parallel, the larger of the two
                                 parallel sub-requirements.
        capacity_parallel_count: Parallel count needed for capacity alone.
        current_parallel_count:  Parallel count needed for peak current alone.
        total_cells:             series_count × parallel_count.
        pack_mass_kg:            Cell mass plus structural overhead [kg].
        installed_capacity_ah:   parallel_count × cell capacity [Ah].
        pack_energy_wh:          Installed capacity at system voltage [Wh].
        max_continuous_draw_a:   parallel_count × cell current limit [A].
        estimated_runtime_min:   Usable capacity at nominal draw [min].
    """
    series_count:            int
    parallel_count:          int
    capacity_parallel_count: int
    current_parallel_count:  int
    total_cells:             int
    pack_mass_kg:            float
    installed_capacity_ah:   float
    pack_energy_wh:          float
    max_continuous_draw_a:   float
    estimated_runtime_min:   float

    @property
    def designation(self) -> str:
        """Conventional ``<S>S<P>P`` label, e.g. ``4S2P``."""
        return f"{self.series_count}S{self.parallel_count}P"


@dataclass(frozen=True)
class FuseSelection:
    """Main fuse chosen from the standard catalog.

    Attributes:
        peak_current_a:    Peak battery current [A].
        margin_current_a:  Peak current times the safety margin [A].
        rating_a:          Selected standard rating [A].
        exceeded_catalog:  True if no standard rating covers the margin
                           current and the largest one was returned.
    """
    peak_current_a:   float
    margin_current_a: float
    rating_a:         float
    exceeded_catalog: bool
