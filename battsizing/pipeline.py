"""
battsizing/pipeline.py
======================
Mobile Base Battery Sizing — End-to-End Sizing Run

Connects the sizing stages in data-flow order:
    1. Aggregate component loads per rail      (power_model.compute_rail_power)
    2. Reflect rail loads onto the battery     (power_model.compute_battery_bus)
    3. Derive operating-state power levels     (mission_profile.compute_state_powers)
    4. Sample the mission power profile        (mission_profile.MissionProfileBuilder)
    5. Integrate consumed / required capacity  (battery_model.EnergyIntegrator)
    6. Solve the series/parallel pack          (battery_model.solve_pack)
    7. Select the main fuse                    (fuse_selector.FuseSelector)

The run is a pure function of :class:`SizingInputs`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from battsizing import config
from battsizing.battery_model import EnergyBudget, EnergyIntegrator, solve_pack
from battsizing.catalog import (
    BatteryBus,
    Cell,
    Component,
    ConverterHop,
    DriveTrain,
    FuseSelection,
    MissionPhase,
    OperatingState,
    PackConfig,
    PowerProfile,
    RailPower,
)
from battsizing.fuse_selector import FuseSelector
from battsizing.mission_profile import (
    MissionProfileBuilder,
    compute_logic_base_power,
    compute_state_powers,
)
from battsizing.power_model import (
    compute_battery_bus,
    compute_component_power,
    compute_subsystem_power,
    validate_catalog,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Inputs and results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SizingInputs:
    """Every input of a sizing run.  Defaults come from :mod:`battsizing.config`."""
    system_voltage:      float
    rail_voltages:       tuple[float, ...]
    converter_hops:      tuple[ConverterHop, ...]
    components:          tuple[Component, ...]
    drive_train:         DriveTrain
    cell:                Cell
    mission_phases:      tuple[MissionPhase, ...]
    mission_duration_s:  float
    profile_step_s:      float
    fuse_safety_margin:  float
    standard_fuses_a:    tuple[float, ...]
    structural_overhead: float

    @classmethod
    def from_config(cls) -> "SizingInputs":
        """Inputs for the reference mobile base as defined in config.py."""
        return cls(
            system_voltage=config.SYSTEM_VOLTAGE,
            rail_voltages=config.RAIL_VOLTAGES,
            converter_hops=config.CONVERTER_HOPS,
            components=config.COMPONENTS,
            drive_train=config.DRIVE_TRAIN,
            cell=config.CELL,
            mission_phases=config.MISSION_PHASES,
            mission_duration_s=config.MISSION_DURATION_S,
            profile_step_s=config.PROFILE_STEP_S,
            fuse_safety_margin=config.FUSE_SAFETY_MARGIN,
            standard_fuses_a=config.STANDARD_FUSES_A,
            structural_overhead=config.PACK_STRUCTURAL_OVERHEAD,
        )


@dataclass(frozen=True)
class SizingResult:
    """Everything the report and plots need from one sizing run."""
    inputs:          SizingInputs
    rails:           tuple[RailPower, ...]
    bus:             BatteryBus
    component_power: dict[str, tuple[float, float]]
    subsystem_power: dict[str, float]
    logic_base_w:    float
    state_powers:    dict[OperatingState, float]
    profile:         PowerProfile
    energy:          EnergyBudget
    pack:            PackConfig
    fuse:            FuseSelection


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------

def run_sizing(inputs: SizingInputs | None = None) -> SizingResult:
    """Size the battery pack and main fuse for a mission.

    Validation happens before any computation: catalog rows and mission
    phases are checked first, so an invalid input never yields a partial
    result.

    Args:
        inputs:  Sizing inputs; ``None`` uses :meth:`SizingInputs.from_config`.

    Raises:
        InvalidCatalogEntry:  Inconsistent component catalog.
        ProfileGapError:      Mission phases leave part of the mission uncovered.
        ProfileOverlapError:  Mission phases overlap or overrun the mission.

    Warns:
        RatingExceededWarning: No standard fuse covers the peak current.
    """
    if inputs is None:
        inputs = SizingInputs.from_config()

    validate_catalog(inputs.components, inputs.rail_voltages)
    builder = MissionProfileBuilder(inputs.mission_phases, inputs.mission_duration_s)

    # Steps 1–2: rail loads reflected onto the battery
    bus = compute_battery_bus(
        inputs.components,
        inputs.rail_voltages,
        inputs.converter_hops,
        inputs.system_voltage,
    )

    # Steps 3–4: duty-cycle profile
    logic_base_w = compute_logic_base_power(bus.nominal_power_w, inputs.drive_train)
    state_powers = compute_state_powers(logic_base_w, inputs.drive_train)
    profile = builder.build(state_powers, inputs.profile_step_s)

    # Step 5: energy integration
    integrator = EnergyIntegrator(depth_of_discharge=inputs.cell.usable_fraction)
    energy = integrator.integrate(profile, inputs.system_voltage)

    # Step 6: pack configuration
    pack = solve_pack(
        cell=inputs.cell,
        system_voltage=inputs.system_voltage,
        required_capacity_ah=energy.required_capacity_ah,
        bus=bus,
        structural_overhead=inputs.structural_overhead,
    )

    # Step 7: fuse, straight from the bus peak current
    selector = FuseSelector(inputs.standard_fuses_a, inputs.fuse_safety_margin)
    fuse = selector.select(bus.peak_current_a)

    logger.info(
        "sizing complete: %s, %.1f min runtime, %g A fuse",
        pack.designation, pack.estimated_runtime_min, fuse.rating_a,
    )
    return SizingResult(
        inputs=inputs,
        rails=bus.rails,
        bus=bus,
        component_power=compute_component_power(inputs.components),
        subsystem_power=compute_subsystem_power(inputs.components),
        logic_base_w=logic_base_w,
        state_powers=state_powers,
        profile=profile,
        energy=energy,
        pack=pack,
        fuse=fuse,
    )
