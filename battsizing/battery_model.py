"""
battsizing/battery_model.py
===========================
Mobile Base Battery Sizing — Energy Integration and Pack Configuration

Integration method: trapezoidal rule on the sampled current profile
    Q = Σ ½ (I[k] + I[k+1]) · (t[k+1] − t[k])          [A·s]
    C_consumed = Q / 3600                              [Ah]
    C_required = C_consumed / DoD                      [Ah]

Pack sizing:
    N_s     = ⌈V_sys / V_cell⌉
    N_p,cap = ⌈C_required / C_cell⌉
    N_p,cur = ⌈I_peak / I_cell,max⌉
    N_p     = max(N_p,cap, N_p,cur)

Scope:
    - Linear capacity accounting only.
    - No temperature model, no capacity fade, no voltage sag under load.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

from battsizing.catalog import BatteryBus, Cell, PackConfig, PowerProfile

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR: float = 3600.0
MINUTES_PER_HOUR: float = 60.0


# ---------------------------------------------------------------------------
# Data containers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EnergyBudget:
    """Charge consumed over the mission and the capacity it requires.

    Attributes:
        time_s:                Sample times [s].
        current_a:             Battery current at each sample [A].
        cumulative_ah:         Running integral of current, same length as
                               ``time_s``, starting at 0.0 [Ah].
        consumed_as:           Total charge drawn [A·s].
        consumed_ah:           Total charge drawn [Ah].
        consumed_wh:           Consumed charge at system voltage [Wh].
        required_capacity_ah:  Consumed charge derated by depth of discharge [Ah].
        depth_of_discharge:    Usable fraction applied (dimensionless).
    """
    time_s:               tuple[float, ...]
    current_a:            tuple[float, ...]
    cumulative_ah:        tuple[float, ...]
    consumed_as:          float
    consumed_ah:          float
    consumed_wh:          float
    required_capacity_ah: float
    depth_of_discharge:   float


@dataclass(frozen=True)
class ParallelRequirement:
    """Both parallel-count constraints and the count that satisfies them."""
    capacity_driven: int
    current_driven:  int

    @property
    def parallel_count(self) -> int:
        return max(self.capacity_driven, self.current_driven)

    @property
    def limiting_constraint(self) -> str:
        """``"capacity"`` or ``"current"``; capacity wins a tie."""
        return "capacity" if self.capacity_driven >= self.current_driven else "current"


# ---------------------------------------------------------------------------
# Energy Integrator
# ---------------------------------------------------------------------------

def integrate_trapezoid(time_s: Sequence[float], values: Sequence[float]) -> tuple[float, list[float]]:
    """Trapezoidal integral and its running total, in one pass.

    Returns:
        ``(total, cumulative)`` where ``cumulative[0] == 0.0`` and
        ``cumulative[-1] == total``.

    Raises:
        ValueError: If the sequences differ in length or are empty.
    """
    if len(time_s) != len(values):
        raise ValueError(
            f"time and value sequences differ in length: {len(time_s)} != {len(values)}"
        )
    if not time_s:
        raise ValueError("Cannot integrate an empty profile")

    total = 0.0
    cumulative = [0.0]
    for k in range(1, len(time_s)):
        total += 0.5 * (values[k - 1] + values[k]) * (time_s[k] - time_s[k - 1])
        cumulative.append(total)
    return total, cumulative


class EnergyIntegrator:
    """Turns a mission power profile into consumed and required capacity.

    Each call to :meth:`integrate` is a pure function of its arguments; the
    integrator holds only its configuration.

    Args:
        depth_of_discharge:  Usable fraction of pack capacity, in (0.0, 1.0].
                             e.g. 0.80 keeps a 20 % reserve in the cells.

    Raises:
        ValueError: If ``depth_of_discharge`` is outside (0.0, 1.0].
    """

    def __init__(self, depth_of_discharge: float) -> None:
        if not (0.0 < depth_of_discharge <= 1.0):
            raise ValueError(
                f"Depth of discharge must be in (0.0, 1.0]; "
                f"received depth_of_discharge={depth_of_discharge!r}"
            )
        self._dod: float = depth_of_discharge

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def integrate(self, profile: PowerProfile, system_voltage: float) -> EnergyBudget:
        """Integrate battery current over the mission.

        Args:
            profile:         Sampled battery power [W].
            system_voltage:  Battery bus voltage used to convert power to
                             current [V].

        Returns:
            :class:`EnergyBudget` including the cumulative consumption curve.

        Example:
            >>> profile = PowerProfile(time_s=(0.0, 10.0), power_w=(100.0, 100.0), dt_s=10.0)
            >>> EnergyIntegrator(1.0).integrate(profile, 10.0).consumed_as
            100.0
        """
        current_a = profile.current_a(system_voltage)
        consumed_as, cumulative_as = integrate_trapezoid(profile.time_s, current_a)
        consumed_ah = consumed_as / SECONDS_PER_HOUR

        budget = EnergyBudget(
            time_s=tuple(profile.time_s),
            current_a=tuple(current_a),
            cumulative_ah=tuple(q / SECONDS_PER_HOUR for q in cumulative_as),
            consumed_as=consumed_as,
            consumed_ah=consumed_ah,
            consumed_wh=consumed_ah * system_voltage,
            required_capacity_ah=compute_required_capacity(consumed_ah, self._dod),
            depth_of_discharge=self._dod,
        )
        logger.info(
            "mission consumes %.4f Ah, safe requirement %.4f Ah",
            budget.consumed_ah, budget.required_capacity_ah,
        )
        return budget

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def depth_of_discharge(self) -> float:
        return self._dod


def compute_required_capacity(consumed_ah: float, depth_of_discharge: float) -> float:
    """Capacity the pack must hold so the mission never dips below its safe floor.

    Equation:
        C_required = C_consumed / DoD

    Raises:
        ValueError: If ``depth_of_discharge`` is outside (0.0, 1.0].
    """
    if not (0.0 < depth_of_discharge <= 1.0):
        raise ValueError(
            f"Depth of discharge must be in (0.0, 1.0]; "
            f"received depth_of_discharge={depth_of_discharge!r}"
        )
    return consumed_ah / depth_of_discharge


# ---------------------------------------------------------------------------
# Pack Configuration Solver
# ---------------------------------------------------------------------------

def compute_series_count(system_voltage: float, cell: Cell) -> int:
    """Minimum cells in series to reach the bus voltage.

    Example:
        >>> compute_series_count(12.0, CELL)   # 3.6 V cell
        4
    """
    if system_voltage <= 0.0:
        raise ValueError(
            f"System voltage must be positive; received system_voltage={system_voltage!r}"
        )
    return math.ceil(system_voltage / cell.voltage_v)


def compute_parallel_requirement(
    required_capacity_ah: float,
    peak_current_a: float,
    cell: Cell,
) -> ParallelRequirement:
    """Parallel counts demanded by capacity and by peak current.

    A string sized for capacity alone may not deliver the peak current, and
    one sized for current alone may run flat early; the pack needs the
    larger of the two.
    """
    if required_capacity_ah < 0.0 or peak_current_a < 0.0:
        raise ValueError(
            f"Capacity and current must be non-negative; received "
            f"required_capacity_ah={required_capacity_ah!r}, peak_current_a={peak_current_a!r}"
        )
    return ParallelRequirement(
        capacity_driven=math.ceil(required_capacity_ah / cell.capacity_ah),
        current_driven=math.ceil(peak_current_a / cell.max_continuous_current_a),
    )


def solve_pack(
    cell: Cell,
    system_voltage: float,
    required_capacity_ah: float,
    bus: BatteryBus,
    structural_overhead: float,
) -> PackConfig:
    """Derive the series/parallel pack that covers the mission.

    Equations:
        N_cells  = N_s · N_p
        m_pack   = N_cells · m_cell · (1 + overhead)
        C_inst   = N_p · C_cell
        E_pack   = C_inst · V_sys
        I_max    = N_p · I_cell,max
        t_run    = N_p · C_cell · DoD / I_batt,nom · 60       [min]

    Runtime uses the nominal battery current: it estimates typical-case
    endurance, not the worst case.

    Args:
        cell:                  Selected cell.
        system_voltage:        Battery bus voltage [V].
        required_capacity_ah:  DoD-derated capacity requirement [Ah].
        bus:                   Battery bus load (nominal and peak current).
        structural_overhead:   Extra mass fraction for pack structure, ≥ 0.

    Returns:
        :class:`PackConfig`.

    Raises:
        ValueError: If the overhead is negative or the nominal battery current
                    is not positive.
    """
    if structural_overhead < 0.0:
        raise ValueError(
            f"Structural overhead must be non-negative; "
            f"received structural_overhead={structural_overhead!r}"
        )
    if bus.nominal_current_a <= 0.0:
        raise ValueError(
            f"Nominal battery current must be positive to estimate runtime; "
            f"received nominal_current_a={bus.nominal_current_a!r}"
        )

    n_series = compute_series_count(system_voltage, cell)
    parallel = compute_parallel_requirement(required_capacity_ah, bus.peak_current_a, cell)
    n_parallel = parallel.parallel_count
    total_cells = n_series * n_parallel
    installed_ah = n_parallel * cell.capacity_ah

    logger.info(
        "pack %dS%dP (%s-limited: capacity needs %d, current needs %d)",
        n_series, n_parallel, parallel.limiting_constraint,
        parallel.capacity_driven, parallel.current_driven,
    )
    return PackConfig(
        series_count=n_series,
        parallel_count=n_parallel,
        capacity_parallel_count=parallel.capacity_driven,
        current_parallel_count=parallel.current_driven,
        total_cells=total_cells,
        pack_mass_kg=total_cells * cell.mass_kg * (1.0 + structural_overhead),
        installed_capacity_ah=installed_ah,
        pack_energy_wh=installed_ah * system_voltage,
        max_continuous_draw_a=n_parallel * cell.max_continuous_current_a,
        estimated_runtime_min=(
            installed_ah * cell.usable_fraction / bus.nominal_current_a * MINUTES_PER_HOUR
        ),
    )
