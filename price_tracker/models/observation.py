# price_tracker/models/observation.py

"""Point-in-time price observation model."""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any


@dataclass(frozen=True)
class ExtractedPrice:
    """Structured result returned by a price extractor."""

    title: str
    price: Decimal
    currency: str


@dataclass(frozen=True)
class Observation:
    """A single price reading for a tracked item at a point in time."""

    identifier: str
    title: str
    price: Decimal
    currency: str
    observed_at: datetime

    def __post_init__(self) -> None:
        if self.price < 0:
            raise ValueError(
                f"price must be >= 0, got {self.price} for {self.identifier}"
            )

    @classmethod
    def from_extracted(
        cls,
        identifier: str,
        extracted: ExtractedPrice,
        observed_at: datetime | None = None,
    ) -> "Observation":
        """Build an observation from an extractor result."""
        return cls(
            identifier=identifier,
            title=extracted.title,
            price=extracted.price,
            currency=extracted.currency,
            observed_at=observed_at or datetime.now(timezone.utc),
        )

    def to_dict(self) -> dict[str, str]:
        """Serialise to the on-disk record shape."""
        return {
            "url": self.identifier,
            "title": self.title,
            "price": str(self.price),
            "currency": self.currency,
            "timestamp": self.observed_at.isoformat(),
        }

    @classmethod
    def from_dict(
        cls,
        identifier: str,
        data: dict[str, Any],
        default_currency: str,
    ) -> "Observation":
        """Parse an on-disk record.

        Older files stored the price as a JSON number and had no
        currency field; both are accepted. Raises ``ValueError`` on a
        record that cannot be interpreted.
        """
        try:
            price = Decimal(str(data["price"]))
        except (KeyError, InvalidOperation) as exc:
            raise ValueError(f"bad price in record for {identifier}") from exc
        if not price.is_finite():
            raise ValueError(f"bad price in record for {identifier}")

        raw_ts = data.get("timestamp") or data.get("observed_at")
        observed_at = (
            datetime.fromisoformat(str(raw_ts).replace("Z", "+00:00"))
            if raw_ts
            else datetime.now(timezone.utc)
        )
        return cls(
            identifier=identifier,
            title=str(data.get("title") or "Unknown Title"),
            price=price,
            currency=str(data.get("currency") or default_currency),
            observed_at=observed_at,
        )
