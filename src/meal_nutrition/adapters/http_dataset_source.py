"""Reference dataset served over HTTP."""

from dataclasses import dataclass

import httpx

from meal_nutrition.errors import DatasetUnavailableError
from meal_nutrition.services.reference_store import DatasetSource


@dataclass
class HttpxDatasetSource(DatasetSource):
    """HTTPX-backed dataset source."""

    url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 15.0

    @classmethod
    def create(cls, url: str, timeout_seconds: float = 15.0) -> "HttpxDatasetSource":
        """Create a dataset source with a managed httpx session."""
        return cls(
            url=url,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def load(self) -> object:
        """Fetch and decode the dataset document."""
        try:
            response = await self.http_client.get(
                self.url, timeout=self.timeout_seconds
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as exc:
            raise DatasetUnavailableError(
                f"Cannot fetch reference dataset from {self.url}: {exc}"
            ) from exc
        except ValueError as exc:
            raise DatasetUnavailableError(
                f"Reference dataset at {self.url} is not valid JSON: {exc}"
            ) from exc

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
