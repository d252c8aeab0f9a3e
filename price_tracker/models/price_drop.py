# price_tracker/models/price_drop.py

"""Price-drop event model."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class PriceDrop:
    """A detected decrease between the stored and the fresh price."""

    identifier: str
    title: str
    old_price: Decimal
    new_price: Decimal
    currency: str

    @property
    def saved(self) -> Decimal:
        """Absolute saving, rounded to cents."""
        return (self.old_price - self.new_price).quantize(
            _CENTS, rounding=ROUND_HALF_UP
        )

    @property
    def percent(self) -> Decimal:
        """Saving as a percentage of the old price, rounded to cents."""
        if self.old_price == 0:
            return Decimal("0.00")
        pct = (self.old_price - self.new_price) / self.old_price * 100
        return pct.quantize(_CENTS, rounding=ROUND_HALF_UP)
