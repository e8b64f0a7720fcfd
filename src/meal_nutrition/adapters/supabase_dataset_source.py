"""Reference dataset stored in Supabase tables."""

import asyncio
import logging
from dataclasses import dataclass

from supabase import Client

from meal_nutrition.errors import DatasetUnavailableError
from meal_nutrition.services.reference_store import DatasetSource

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseDatasetSource(DatasetSource):
    """Builds the dataset document from food and alias tables."""

    client: Client
    foods_table: str = "food_items"
    aliases_table: str = "food_aliases"

    async def load(self) -> object:
        return await asyncio.to_thread(self._fetch)

    def _fetch(self) -> dict[str, object]:
        try:
            response = self.client.table(self.foods_table).select("*").execute()
        except Exception as exc:
            raise DatasetUnavailableError(
                f"Cannot query {self.foods_table}: {exc}"
            ) from exc
        rows = response.data or []
        aliases = self._fetch_aliases()

        foods: dict[str, dict[str, object]] = {}
        for row in rows:
            row_id = row.get("id")
            key = str(row.get("original_id") or row_id)
            inline = row.get("aliases")
            foods[key] = {
                **row,
                "id": key,
                "aliases": [
                    *(inline if isinstance(inline, list) else []),
                    *aliases.get(str(row_id), []),
                ],
            }
        return {"foods": foods}

    def _fetch_aliases(self) -> dict[str, list[str]]:
        """Return alias texts grouped by food id; failures yield no aliases."""
        try:
            response = (
                self.client.table(self.aliases_table)
                .select("food_id, alias_text")
                .execute()
            )
        except Exception as exc:
            _logger.warning("Food aliases unavailable, continuing without: %s", exc)
            return {}
        grouped: dict[str, list[str]] = {}
        for row in response.data or []:
            alias = row.get("alias_text")
            if isinstance(alias, str) and alias.strip():
                grouped.setdefault(str(row.get("food_id")), []).append(alias)
        return grouped
