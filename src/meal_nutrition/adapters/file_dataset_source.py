"""Reference dataset stored as a local JSON file."""

import asyncio
import json
from dataclasses import dataclass
from pathlib import Path

from meal_nutrition.errors import DatasetUnavailableError
from meal_nutrition.services.reference_store import DatasetSource


@dataclass
class JsonFileDatasetSource(DatasetSource):
    """Reads the dataset document from a JSON file."""

    path: Path

    async def load(self) -> object:
        """Read and decode the file without blocking the event loop."""
        return await asyncio.to_thread(self._read)

    def _read(self) -> object:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise DatasetUnavailableError(
                f"Cannot read reference dataset {self.path}: {exc}"
            ) from exc
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise DatasetUnavailableError(
                f"Reference dataset {self.path} is not valid JSON: {exc}"
            ) from exc
