"""HTTP package catalog resolver.

Protocol:
- `GET <base_url>/packages/<name>` -> `{"packages": [{"name", "version", "path"?}]}`
- 404 means the catalog has no package with that name.

Selection (constraint matching, highest version) is shared with the static
catalog so both resolvers behave identically.
"""

from __future__ import annotations

from types import TracebackType
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from adapters.catalog.models import PackageListResponse
from adapters.catalog.resolver import DEFAULT_STORE_DIR, select_entry
from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.models import ResolvedTool, ToolReference
from core.errors import CatalogUnavailable, UnknownTool


class HttpCatalogResolver:
    """Resolves packages against a remote catalog.

    Use as an async context manager so the shared client is closed:

        async with HttpCatalogResolver(url) as resolver:
            tool = await resolver.resolve(ref)
    """

    def __init__(
        self,
        base_url: str,
        settings: AppSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._base_url = base_url.rstrip("/")
        self._store_dir = str(self._settings.store_dir or DEFAULT_STORE_DIR)
        self._owns_client = client is None
        self._client = client or build_async_client(self._settings, base_url=self._base_url)

    async def __aenter__(self) -> "HttpCatalogResolver":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _url(self, name: str) -> str:
        return f"{self._base_url}/packages/{quote(name, safe='')}"

    async def resolve(self, reference: ToolReference) -> ResolvedTool:
        try:
            response = await self._client.get(self._url(reference.name))
        except httpx.HTTPError as exc:
            raise CatalogUnavailable(
                f"catalog request for '{reference.name}' failed: {exc}",
                name=reference.name,
            ) from exc

        if response.status_code == 404:
            raise UnknownTool(reference.name)
        if response.status_code < 200 or response.status_code >= 300:
            raise CatalogUnavailable(
                f"catalog answered HTTP {response.status_code} for '{reference.name}'",
                name=reference.name,
            )

        try:
            listing = PackageListResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise CatalogUnavailable(
                f"invalid catalog response for '{reference.name}': {exc}",
                name=reference.name,
            ) from exc

        return select_entry(reference, listing.packages, self._store_dir)
