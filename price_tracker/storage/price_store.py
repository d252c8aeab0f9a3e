# price_tracker/storage/price_store.py

"""Durable map from tracked-item identifier to its latest observation."""

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from price_tracker.models.observation import Observation
from price_tracker.storage.json_file import load_json, write_json_atomic

logger = logging.getLogger("price_tracker.price_store")


class PriceStore:
    """Latest-observation store, loaded once and persisted per batch.

    Holds at most one :class:`Observation` per identifier. Absence of an
    identifier means the item has never been observed successfully.
    """

    def __init__(self, path: Path, default_currency: str = "PLN") -> None:
        self.path = path
        self.default_currency = default_currency
        self._observations: dict[str, Observation] = {}

    def load(self) -> None:
        """Replace in-memory state with the contents of the backing file."""
        raw: Any = load_json(self.path, {})
        if not isinstance(raw, dict):
            logger.warning(
                "Price file %s is not an object, starting empty",
                self.path,
            )
            raw = {}

        observations: dict[str, Observation] = {}
        for identifier, record in raw.items():
            if not isinstance(record, dict):
                logger.warning("Skipping malformed record for %s", identifier)
                continue
            try:
                observations[identifier] = Observation.from_dict(
                    identifier, record, self.default_currency
                )
            except ValueError as exc:
                logger.warning("Skipping record for %s: %s", identifier, exc)

        self._observations = observations
        logger.info(
            "Loaded %d stored prices from %s",
            len(observations),
            self.path,
        )

    def get(self, identifier: str) -> Observation | None:
        return self._observations.get(identifier)

    def update(self, observation: Observation) -> None:
        """Overwrite the stored observation for its identifier."""
        self._observations[observation.identifier] = observation

    def persist(self) -> None:
        """Atomically write all observations to the backing file.

        Raises :class:`~price_tracker.errors.StoreWriteError` on failure.
        """
        data = {
            identifier: obs.to_dict()
            for identifier, obs in self._observations.items()
        }
        write_json_atomic(self.path, data)
        logger.debug("Persisted %d prices to %s", len(data), self.path)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._observations

    def __len__(self) -> int:
        return len(self._observations)

    def __iter__(self) -> Iterator[str]:
        return iter(self._observations)
