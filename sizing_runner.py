"""
sizing_runner.py
================
Mobile Base Battery Sizing — Report and Plot Runner

Runs the sizing pipeline on the reference configuration and presents it:
    1. Size pack and fuse                    (pipeline.run_sizing)
    2. Print system power architecture results
    3. Print main fuse selection
    4. Print nominal power breakdown by subsystem
    5. Plot current profile and cumulative capacity
    6. Plot component and subsystem power breakdown

Usage:
    python sizing_runner.py
"""

from __future__ import annotations

import logging
import warnings

import matplotlib.pyplot as plt

from battsizing.config import SUBSYSTEM_LABELS
from battsizing.errors import RatingExceededWarning
from battsizing.pipeline import SizingInputs, SizingResult, run_sizing


# ---------------------------------------------------------------------------
# Output configuration (presentation only)
# ---------------------------------------------------------------------------

PROFILE_PLOT_FILE: str = "mission_current_profile.png"
BREAKDOWN_PLOT_FILE: str = "power_breakdown.png"

logger = logging.getLogger("sizing_runner")


# ---------------------------------------------------------------------------
# Step 1: Sizing run
# ---------------------------------------------------------------------------

def run() -> SizingResult:
    """Size the reference mobile base, surfacing a fuse shortfall on the console."""
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", RatingExceededWarning)
        result = run_sizing(SizingInputs.from_config())
    for w in caught:
        logger.warning("%s", w.message)
    return result


# ---------------------------------------------------------------------------
# Step 2: Power architecture summary
# ---------------------------------------------------------------------------

def print_console_summary(result: SizingResult) -> None:
    """Print battery drain, mission energy and the final pack configuration."""

    bus, energy, pack = result.bus, result.energy, result.pack
    sep = "─" * 60

    print(f"\n{'═' * 60}")
    print("  MOBILE BASE BATTERY SIZING — SYSTEM POWER ARCHITECTURE")
    print(f"{'═' * 60}")

    print(f"\n{sep}")
    print("  RAIL LOADS (before converter losses)")
    print(sep)
    for rail in result.rails:
        print(f"    {rail.voltage:4.1f} V rail:  nominal {rail.nominal_power_w:7.3f} W   "
              f"peak {rail.peak_power_w:7.3f} W")

    print(f"\n{sep}")
    print("  BATTERY DRAIN")
    print(sep)
    print(f"    Nominal                     :  {bus.nominal_power_w:7.2f} W  ({bus.nominal_current_a:.2f} A)")
    print(f"    Peak                        :  {bus.peak_power_w:7.2f} W  ({bus.peak_current_a:.2f} A)")

    print(f"\n{sep}")
    print("  MISSION ENERGY")
    print(sep)
    print(f"    Energy consumed             :  {energy.consumed_ah:7.3f} Ah  ({energy.consumed_wh:.2f} Wh)")
    print(f"    Depth of discharge          :  {energy.depth_of_discharge:.0%}")
    print(f"    Safe pack requirement       :  {energy.required_capacity_ah:7.3f} Ah")

    print(f"\n{sep}")
    print(f"  FINAL CONFIGURATION:  {pack.designation}")
    print(sep)
    print(f"    Parallel for capacity       :  {pack.capacity_parallel_count}")
    print(f"    Parallel for peak current   :  {pack.current_parallel_count}")
    print(f"    Installed pack energy       :  {pack.installed_capacity_ah:.2f} Ah  ({pack.pack_energy_wh:.2f} Wh)")
    print(f"    Max safe continuous draw    :  {pack.max_continuous_draw_a:.1f} A")
    print(f"    Estimated max run time      :  {pack.estimated_runtime_min:.1f} min")
    print(f"    Estimated pack weight       :  {pack.pack_mass_kg:.2f} kg")
    print(f"{'═' * 60}\n")


# ---------------------------------------------------------------------------
# Step 3: Fuse selection
# ---------------------------------------------------------------------------

def print_fuse_report(result: SizingResult) -> None:
    """Print the main fuse selection."""

    fuse = result.fuse
    margin = result.inputs.fuse_safety_margin
    status = "✘ EXCEEDS STANDARD CATALOG" if fuse.exceeded_catalog else "✔ STANDARD RATING"

    print(f"{'═' * 60}")
    print("  MAIN FUSE SELECTION")
    print(f"{'═' * 60}")
    print(f"    System peak current         :  {fuse.peak_current_a:7.2f} A")
    print(f"    Calculated min fuse         :  {fuse.margin_current_a:7.2f} A  (with {margin - 1.0:.0%} margin)")
    print(f"    Recommended main fuse       :  {fuse.rating_a:7g} A  [{status}]")
    print(f"{'═' * 60}\n")


# ---------------------------------------------------------------------------
# Step 4: Subsystem breakdown
# ---------------------------------------------------------------------------

def print_subsystem_breakdown(result: SizingResult) -> None:
    """Print a tabular nominal power breakdown by subsystem."""

    total = sum(result.subsystem_power.values())
    print(f"  {'Subsystem':<35} {'Power':>10}  {'Share':>6}")
    print("─" * 60)
    for key, watts in result.subsystem_power.items():
        share = watts / total if total else 0.0
        print(f"  {SUBSYSTEM_LABELS.get(key, key):<35} {watts:>8.3f} W  {share:>6.1%}")
    print("─" * 60 + "\n")


# ---------------------------------------------------------------------------
# Step 5: Plot — current profile and cumulative capacity
# ---------------------------------------------------------------------------

def plot_mission_profile(result: SizingResult) -> None:
    """Render and save battery current and cumulative capacity vs time."""

    energy, bus = result.energy, result.bus
    times = list(energy.time_s)
    current = list(energy.current_a)

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(10, 7), sharex=True)
    fig.suptitle(
        "Mobile Base — Battery Current Drain Over Mission\n"
        f"{result.pack.designation}  |  dt = {result.profile.dt_s:g} s  |  "
        f"Trapezoidal Integration",
        fontsize=12, fontweight="bold",
    )

    # ── Current subplot ──────────────────────────────────────────────────
    ax1.plot(times, current, color="#2196F3", linewidth=1.5, label="Battery current")
    ax1.fill_between(times, current, 0.0, color="#2196F3", alpha=0.1)
    ax1.axhline(bus.peak_current_a, color="#F44336", linewidth=2, linestyle="--",
                label=f"Calculated peak capability ({bus.peak_current_a:.1f} A)")
    ax1.axhline(bus.nominal_current_a, color="#4CAF50", linewidth=2, linestyle="--",
                label=f"Nominal baseline ({bus.nominal_current_a:.2f} A)")
    ax1.set_ylabel("Current [A]", fontsize=11)
    ax1.set_ylim(0, bus.peak_current_a + 5)
    ax1.legend(fontsize=9, loc="upper left")
    ax1.grid(True, linestyle="--", alpha=0.5)

    # ── Cumulative capacity subplot ──────────────────────────────────────
    ax2.plot(times, energy.cumulative_ah, color="#9C27B0", linewidth=2, label="Capacity used")
    ax2.axhline(energy.required_capacity_ah, color="#000000", linewidth=1.5, linestyle="--",
                label=f"Required safe pack capacity ({energy.required_capacity_ah:.3f} Ah)")
    ax2.set_xlabel("Time [s]", fontsize=11)
    ax2.set_ylabel("Capacity Used [Ah]", fontsize=11)
    ax2.set_xlim(0, result.inputs.mission_duration_s)
    ax2.legend(fontsize=9, loc="upper left")
    ax2.grid(True, linestyle="--", alpha=0.5)

    plt.tight_layout()
    plt.savefig(PROFILE_PLOT_FILE, dpi=150, bbox_inches="tight")
    print(f"  [plot] Saved → {PROFILE_PLOT_FILE}")


# ---------------------------------------------------------------------------
# Step 6: Plot — power breakdown
# ---------------------------------------------------------------------------

def plot_power_breakdown(result: SizingResult) -> None:
    """Render and save per-component bars and the subsystem distribution pie."""

    names = list(result.component_power)
    nominal = [p[0] for p in result.component_power.values()]
    peak = [p[1] for p in result.component_power.values()]

    fig, (ax1, ax2, ax3) = plt.subplots(1, 3, figsize=(16, 5.5))
    fig.suptitle("Mobile Base — Power Breakdown Analysis", fontsize=12, fontweight="bold")

    ax1.bar(names, nominal, color="#33997F")
    ax1.set_title("Nominal Power Breakdown", fontsize=10, loc="left")
    ax1.set_ylabel("Continuous Power [W]", fontsize=11)
    ax1.tick_params(axis="x", labelrotation=45)
    ax1.grid(True, linestyle="--", alpha=0.5)

    ax2.bar(names, peak, color="#CC4D4D")
    ax2.set_title("Peak/Stall Power Breakdown", fontsize=10, loc="left")
    ax2.set_ylabel("Maximum Power [W]", fontsize=11)
    ax2.tick_params(axis="x", labelrotation=45)
    ax2.grid(True, linestyle="--", alpha=0.5)

    labels = [SUBSYSTEM_LABELS.get(k, k) for k in result.subsystem_power]
    ax3.pie(list(result.subsystem_power.values()), autopct="%1.1f%%")
    ax3.legend(labels, fontsize=9, loc="center left", bbox_to_anchor=(1.0, 0.5))
    ax3.set_title("Nominal Distribution by Subsystem", fontsize=10, loc="left")

    plt.tight_layout()
    plt.savefig(BREAKDOWN_PLOT_FILE, dpi=150, bbox_inches="tight")
    print(f"  [plot] Saved → {BREAKDOWN_PLOT_FILE}")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    print("\nRunning mobile base battery sizing...", flush=True)

    result = run()

    print_console_summary(result)
    print_fuse_report(result)
    print_subsystem_breakdown(result)

    # plots last — opens windows / saves files
    plot_mission_profile(result)
    plot_power_breakdown(result)
    plt.show()


if __name__ == "__main__":
    main()
