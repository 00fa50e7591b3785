"""Rent relief calculation."""

from __future__ import annotations

from decimal import Decimal

from naijapaye.backend.app.models.engine import as_decimal
from naijapaye.backend.config.schema import Reliefs


def compute_rent_relief(annual_rent_paid: Decimal | int | float, reliefs: Reliefs) -> Decimal:
    """Return the share of rent paid that reduces taxable income, capped."""

    rent = as_decimal(annual_rent_paid, "annual_rent_paid")
    if not rent.is_finite():
        raise ValueError("Annual rent paid must be a finite number")
    if rent < 0:
        raise ValueError("Annual rent paid cannot be negative")

    return min(rent * reliefs.rent_relief, reliefs.rent_relief_cap)


__all__ = ["compute_rent_relief"]
