"""Synthetic dyno curves for stage charts.

There is no dynamometer data in the catalog, only peak figures. These curves
are cosmetic: a smooth rise from half of the peak to the peak, then a linear
fall of up to 35% towards the rev limit. They are not a physical model.

    rise:  peak * (0.5 + 0.5 * progress ** 1.2)
    fall:  peak * (1 - 0.35 * progress)

Horsepower peaks 60% of the way through the RPM axis, torque at 40%.
"""

import math

from ..models.catalog import Stage
from ..models.pages import DynoChart

DIESEL_RPM: tuple[int, ...] = tuple(range(1500, 5001, 500))
PETROL_RPM: tuple[int, ...] = tuple(range(2000, 7001, 500))

HP_PEAK_POSITION = 0.6
NM_PEAK_POSITION = 0.4
RISE_EXPONENT = 1.2
FALL_EXPONENT = 1.0
RISE_FLOOR = 0.5
MAX_FALL_OFF = 0.35


def rpm_axis(fuel: str | None) -> tuple[int, ...]:
    """Diesels rev lower and narrower than petrol engines."""
    if fuel and "diesel" in fuel.lower():
        return DIESEL_RPM
    return PETROL_RPM


def peak_index(axis_length: int, is_horsepower: bool) -> int:
    position = HP_PEAK_POSITION if is_horsepower else NM_PEAK_POSITION
    return math.floor(axis_length * position)


def generate_dyno_curve(
    peak_value: float, is_horsepower: bool, fuel: str | None
) -> list[float]:
    """One value per RPM point on the engine's axis.

    Args:
        peak_value: Peak hk or Nm figure (finite, non-negative)
        is_horsepower: Horsepower curves peak later than torque curves
        fuel: Engine fuel label; anything containing "diesel" uses the diesel axis

    Returns:
        Curve values; the value at the peak index equals ``peak_value``
    """
    rpm = rpm_axis(fuel)
    peak = peak_index(len(rpm), is_horsepower)
    start_rpm, peak_rpm, end_rpm = rpm[0], rpm[peak], rpm[-1]

    curve = []
    for point in rpm:
        if point <= peak_rpm:
            progress = (point - start_rpm) / (peak_rpm - start_rpm)
            curve.append(
                peak_value * (RISE_FLOOR + (1 - RISE_FLOOR) * progress**RISE_EXPONENT)
            )
        else:
            progress = (point - peak_rpm) / (end_rpm - peak_rpm)
            curve.append(peak_value * (1 - MAX_FALL_OFF * progress**FALL_EXPONENT))
    return curve


def build_dyno_chart(stage: Stage, fuel: str | None) -> DynoChart | None:
    """Original and tuned curves for a stage; None when it has no figures."""
    curves = {
        "orig_hk": (stage.orig_hk, True),
        "tuned_hk": (stage.tuned_hk, True),
        "orig_nm": (stage.orig_nm, False),
        "tuned_nm": (stage.tuned_nm, False),
    }
    values = {
        name: generate_dyno_curve(peak, is_hp, fuel)
        for name, (peak, is_hp) in curves.items()
        if peak is not None and peak > 0
    }
    if not values:
        return None
    return DynoChart(rpm=list(rpm_axis(fuel)), **values)
