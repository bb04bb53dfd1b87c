"""
Domain: installation price table.

A customer's estimated deal value is looked up once, at creation time, from the
installation type they enquired about. Unknown or blank installation types are
valued at zero rather than rejected.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Mapping, Union


class InstallationType(str, Enum):
    HEAT_PUMP = "heat_pump"
    SOLAR = "solar"
    BATTERY = "battery"
    HEAT_PUMP_SOLAR = "heat_pump_solar"
    HEAT_PUMP_SOLAR_BATTERY = "heat_pump_solar_battery"
    MVHR = "mvhr"
    GREEN_BUILD = "green_build"


ESTIMATED_VALUES: Mapping[InstallationType, Decimal] = {
    InstallationType.HEAT_PUMP: Decimal("12000"),
    InstallationType.SOLAR: Decimal("15000"),
    InstallationType.BATTERY: Decimal("8000"),
    InstallationType.HEAT_PUMP_SOLAR: Decimal("25000"),
    InstallationType.HEAT_PUMP_SOLAR_BATTERY: Decimal("35000"),
    InstallationType.MVHR: Decimal("5000"),
    InstallationType.GREEN_BUILD: Decimal("50000"),
}


def estimated_value(installation_type: Union[InstallationType, str, None]) -> Decimal:
    """Baseline deal value for an installation type (0 for anything not in the table)."""

    if installation_type is None:
        return Decimal("0")
    try:
        key = InstallationType(installation_type)
    except ValueError:
        return Decimal("0")
    return ESTIMATED_VALUES[key]


__all__ = ["InstallationType", "ESTIMATED_VALUES", "estimated_value"]
