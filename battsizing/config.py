"""
battsizing/config.py
====================
Mobile Base Battery Sizing — System Constants

Engineering inputs for the mobile base & perception module: rail voltages,
converter efficiencies, component loads, selected cell, mission timeline and
fuse protection.

Rules:
    - No calculations or derived quantities here.
    - Voltages in V, currents in A, power in W, time in s, capacity in Ah,
      mass in kg.
    - Catalog rows are typed records (see battsizing/catalog.py).
    - No simulation logic or conditional expressions.
"""

from battsizing.catalog import (
    Cell,
    Component,
    ConverterHop,
    DriveTrain,
    MissionPhase,
    OperatingState,
)


# ---------------------------------------------------------------------------
# Electrical rails
# ---------------------------------------------------------------------------

SYSTEM_VOLTAGE: float = 12.0     # Volts — battery bus / motor domain
RAIL_VOLTAGE_12V: float = 12.0   # Volts — motor domain
RAIL_VOLTAGE_5V: float = 5.0     # Volts — processing domain
RAIL_VOLTAGE_3V3: float = 3.3    # Volts — logic domain

RAIL_VOLTAGES: tuple[float, ...] = (RAIL_VOLTAGE_12V, RAIL_VOLTAGE_5V, RAIL_VOLTAGE_3V3)


# ---------------------------------------------------------------------------
# Converter efficiencies
# ---------------------------------------------------------------------------

EFFICIENCY_5V_BUCK: float = 0.90       # 12 V -> 5 V buck
EFFICIENCY_3V3_REGULATOR: float = 0.85  # 5 V -> 3.3 V regulator

CONVERTER_HOPS: tuple[ConverterHop, ...] = (
    ConverterHop(source_voltage=RAIL_VOLTAGE_5V,  target_voltage=RAIL_VOLTAGE_3V3,
                 efficiency=EFFICIENCY_3V3_REGULATOR),
    ConverterHop(source_voltage=RAIL_VOLTAGE_12V, target_voltage=RAIL_VOLTAGE_5V,
                 efficiency=EFFICIENCY_5V_BUCK),
)
"""Conversion chain in load -> source order.

The 3.3 V rail is reflected onto the 5 V rail first, then the combined 5 V
domain onto the battery.  The 12 V motor rail is the battery bus itself.
"""


# ---------------------------------------------------------------------------
# Component catalog
# ---------------------------------------------------------------------------

COMPONENTS: tuple[Component, ...] = (
    # --- 12 V rail ---
    Component("Omni Motors",      12.0, 4, 0.800, 5.500, "actuation"),
    Component("Motor Drivers",    12.0, 2, 0.030, 0.100, "actuation"),
    # --- 5 V rail ---
    Component("Raspberry Pi",     5.0,  1, 0.800, 3.000, "perception"),
    Component("RealSense Cam",    5.0,  1, 0.700, 1.200, "perception"),
    Component("Encoders",         5.0,  4, 0.010, 0.015, "perception"),
    Component("CAN Transceiver",  5.0,  1, 0.010, 0.075, "control"),
    Component("LED Indicators",   5.0,  5, 0.020, 0.020, "control"),
    # --- 3.3 V rail ---
    Component("ESP32 MCU",        3.3,  1, 0.080, 0.260, "control"),
    Component("IMU",              3.3,  1, 0.004, 0.005, "perception"),
    Component("Opto-isolators",   3.3,  4, 0.015, 0.020, "control"),
    Component("Buttons/Switches", 3.3,  3, 0.001, 0.002, "control"),
)

SUBSYSTEM_LABELS: dict[str, str] = {
    "actuation":  "Actuation (Drive)",
    "perception": "Perception & Navigation",
    "control":    "Control, Comms & UI",
}


# ---------------------------------------------------------------------------
# Drive train and operating states
# ---------------------------------------------------------------------------

DRIVE_TRAIN: DriveTrain = DriveTrain(
    motor_count=4,
    rail_voltage=RAIL_VOLTAGE_12V,
    drive_current_a=0.8,        # average steady driving
    aggressive_current_a=2.5,   # aggressive strafing / heavy acceleration
    stall_current_a=5.5,        # hard stall against a wall or object
    perception_spike_w=12.0,    # Pi + camera burst during QR read
)


# ---------------------------------------------------------------------------
# Battery cell and pack
# ---------------------------------------------------------------------------

DEPTH_OF_DISCHARGE: float = 0.80
"""Usable fraction of rated cell capacity (dimensionless, 0.0–1.0)."""

CELL: Cell = Cell(
    name="18650 Li-ion 3.0 Ah",
    voltage_v=3.6,
    capacity_ah=3.0,
    max_continuous_current_a=15.0,
    mass_kg=0.048,
    usable_fraction=DEPTH_OF_DISCHARGE,
)

PACK_STRUCTURAL_OVERHEAD: float = 0.15
"""Mass added for interconnects, BMS and enclosure, as a fraction of cell mass."""


# ---------------------------------------------------------------------------
# Mission profile
# ---------------------------------------------------------------------------

MISSION_DURATION_S: float = 300.0   # five-minute run
PROFILE_STEP_S: float = 0.1         # sampling step

MAX_PROFILE_SAMPLES: int = 10_000_000
"""Upper bound on mission profile samples (duration / step + 1)."""

MISSION_PHASES: tuple[MissionPhase, ...] = (
    MissionPhase(0.0,   10.0,  OperatingState.IDLE,       "Boot & setup"),
    MissionPhase(10.0,  65.0,  OperatingState.DRIVE,      "Smooth teleop driving"),
    MissionPhase(65.0,  70.0,  OperatingState.AGGRESSIVE, "Aggressive manoeuvring near ball pit"),
    MissionPhase(70.0,  80.0,  OperatingState.PERCEPTION, "QR read, motors off"),
    MissionPhase(80.0,  108.0, OperatingState.DRIVE,      "Autonomous drive to drop-off"),
    MissionPhase(108.0, 110.0, OperatingState.AGGRESSIVE, "Precision X/Y alignment"),
    MissionPhase(110.0, 111.0, OperatingState.STALL,      "Bumped the drop-off station"),
    MissionPhase(111.0, 115.0, OperatingState.AGGRESSIVE, "Correction manoeuvring"),
    MissionPhase(115.0, 130.0, OperatingState.IDLE,       "Arm working, base motors off"),
    MissionPhase(130.0, 298.0, OperatingState.DRIVE,      "Driving to exit"),
    MissionPhase(298.0, 300.0, OperatingState.STALL,      "Final aggressive stop"),
)


# ---------------------------------------------------------------------------
# Main fuse protection
# ---------------------------------------------------------------------------

FUSE_SAFETY_MARGIN: float = 1.2
"""Multiplier applied to peak battery current before fuse selection."""

STANDARD_FUSES_A: tuple[float, ...] = (5.0, 7.5, 10.0, 15.0, 20.0, 25.0, 30.0, 40.0, 50.0, 60.0, 80.0)
"""Standard ATC blade fuse ratings [A], ascending."""
