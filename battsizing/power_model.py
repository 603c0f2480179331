"""
battsizing/power_model.py
=========================
Mobile Base Battery Sizing — Rail and Battery Bus Power

Rules:
    - Every function is a pure, deterministic mapping of its arguments.
    - No shared accumulators; each call builds its own totals.
    - No simulation loop, no I/O.

Equations:
    I_comp   = quantity · I_unit                     (nominal and peak)
    P_rail   = V_rail · Σ I_comp                     (per rail)
    P_source += P_target / η                         (per converter hop)
    I_batt   = P_batt / V_sys
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from battsizing.catalog import BatteryBus, Component, ConverterHop, RailPower
from battsizing.errors import InvalidCatalogEntry

logger = logging.getLogger(__name__)

# Rail voltages closer than this are the same rail.
_RAIL_TOLERANCE_V: float = 1e-9


def _match_rail(voltage: float, rail_voltages: Iterable[float]) -> float | None:
    for rail in rail_voltages:
        if abs(rail - voltage) <= _RAIL_TOLERANCE_V:
            return rail
    return None


# ---------------------------------------------------------------------------
# Catalog validation
# ---------------------------------------------------------------------------

def validate_catalog(components: Iterable[Component], rail_voltages: Sequence[float]) -> None:
    """Check that every component sits on a configured rail.

    Per-row consistency (quantity, currents) is enforced by
    :class:`~battsizing.catalog.Component` itself.

    Raises:
        InvalidCatalogEntry: If a component's rail is not in ``rail_voltages``.
    """
    for comp in components:
        if _match_rail(comp.rail_voltage, rail_voltages) is None:
            raise InvalidCatalogEntry(
                f"{comp.name}: rail {comp.rail_voltage!r} V is not one of the "
                f"configured rails {tuple(rail_voltages)!r}"
            )


# ---------------------------------------------------------------------------
# Rail Power Aggregator
# ---------------------------------------------------------------------------

def compute_rail_power(
    components: Iterable[Component],
    rail_voltages: Sequence[float],
) -> dict[float, RailPower]:
    """Roll component currents up into per-rail nominal and peak power.

    Equation:
        P_rail = V_rail · Σ (quantity · I_unit)   over components on the rail

    Args:
        components:     Component catalog.
        rail_voltages:  Configured rails [V].  Every rail appears in the result,
                        with zero power if no component uses it.

    Returns:
        Mapping of rail voltage to :class:`RailPower`, in ``rail_voltages`` order.

    Raises:
        InvalidCatalogEntry: If a component sits on an unconfigured rail.

    Example:
        >>> rails = compute_rail_power([Component("Pi", 5.0, 1, 0.8, 3.0)], [12.0, 5.0])
        >>> rails[5.0].nominal_power_w
        4.0
    """
    components = list(components)
    validate_catalog(components, rail_voltages)

    nominal_a: dict[float, float] = {v: 0.0 for v in rail_voltages}
    peak_a: dict[float, float] = {v: 0.0 for v in rail_voltages}
    for comp in components:
        rail = _match_rail(comp.rail_voltage, rail_voltages)
        nominal_a[rail] += comp.nominal_current_a
        peak_a[rail] += comp.max_current_a

    return {
        v: RailPower(
            voltage=v,
            nominal_power_w=v * nominal_a[v],
            peak_power_w=v * peak_a[v],
        )
        for v in rail_voltages
    }


def compute_component_power(components: Iterable[Component]) -> dict[str, tuple[float, float]]:
    """Per-component ``(nominal_W, peak_W)`` in catalog order."""
    return {c.name: (c.nominal_power_w, c.peak_power_w) for c in components}


def compute_subsystem_power(components: Iterable[Component]) -> dict[str, float]:
    """Nominal load power grouped by subsystem, before converter losses [W].

    Subsystems appear in order of first occurrence in the catalog.
    """
    totals: dict[str, float] = {}
    for comp in components:
        totals[comp.subsystem] = totals.get(comp.subsystem, 0.0) + comp.nominal_power_w
    return totals


# ---------------------------------------------------------------------------
# Bus Reflector
# ---------------------------------------------------------------------------

def reflect_to_source(
    rail_power_w: dict[float, float],
    hops: Sequence[ConverterHop],
    system_voltage: float,
) -> float:
    """Cascade downstream rail loads through converter hops onto the battery.

    Hops are applied in order.  Each hop moves the power accumulated on its
    target rail onto its source rail, divided by the hop efficiency:

        P_source ← P_source + P_target / η

    so losses compound multiplicatively along a chain.  With the default
    architecture this is:

        P_batt = P_12 + (P_5 + P_3.3 / η_3.3) / η_5

    Args:
        rail_power_w:    Raw load per rail [W], keyed by rail voltage.
        hops:            Conversion stages in load -> source order.
        system_voltage:  Battery bus voltage [V]; its rail needs no hop.

    Returns:
        Total power drawn from the battery [W].

    Raises:
        ValueError: If a loaded rail is left unreflected after all hops,
                    which means a hop is missing or out of order.
    """
    pending: dict[float, float] = dict(rail_power_w)
    for hop in hops:
        target = _match_rail(hop.target_voltage, pending) or hop.target_voltage
        source = _match_rail(hop.source_voltage, pending) or hop.source_voltage
        drawn_w = pending.pop(target, 0.0) / hop.efficiency
        pending[source] = pending.get(source, 0.0) + drawn_w
        logger.debug(
            "hop %.1f V -> %.1f V (eta=%.2f): %.4f W reflected",
            hop.target_voltage, hop.source_voltage, hop.efficiency, drawn_w,
        )

    bus_rail = _match_rail(system_voltage, pending)
    battery_w = pending.pop(bus_rail, 0.0) if bus_rail is not None else 0.0

    stranded = {v: p for v, p in pending.items() if p != 0.0}
    if stranded:
        raise ValueError(
            f"Rails {sorted(stranded)!r} V have no conversion path to the "
            f"{system_voltage!r} V battery bus; check the converter hop order"
        )
    return battery_w


def compute_battery_bus(
    components: Iterable[Component],
    rail_voltages: Sequence[float],
    hops: Sequence[ConverterHop],
    system_voltage: float,
) -> BatteryBus:
    """Compute nominal and peak battery power and current.

    Nominal and peak are each rolled up from their own component currents
    and reflected separately.  Because every efficiency is ≤ 1, the battery
    power is never below the raw sum of rail powers.

    Raises:
        ValueError: If ``system_voltage`` is not positive.
        InvalidCatalogEntry: If a component sits on an unconfigured rail.
    """
    if system_voltage <= 0.0:
        raise ValueError(
            f"System voltage must be positive; received system_voltage={system_voltage!r}"
        )
    rails = compute_rail_power(components, rail_voltages)

    p_nominal = reflect_to_source({v: r.nominal_power_w for v, r in rails.items()}, hops, system_voltage)
    p_peak = reflect_to_source({v: r.peak_power_w for v, r in rails.items()}, hops, system_voltage)

    logger.info("battery bus: nominal %.2f W, peak %.2f W", p_nominal, p_peak)
    return BatteryBus(
        system_voltage=system_voltage,
        nominal_power_w=p_nominal,
        peak_power_w=p_peak,
        nominal_current_a=p_nominal / system_voltage,
        peak_current_a=p_peak / system_voltage,
        rails=tuple(rails.values()),
    )
