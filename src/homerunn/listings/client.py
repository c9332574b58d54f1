"""
Cliente de la API de listings (cloud functions sobre el MLS).

Devuelve páginas de listings con el token para pedir la siguiente.
Ante cualquier error de red o de formato devuelve una página vacía:
el feed se queda sin cartas nuevas en lugar de romperse.
"""

import asyncio
import json
import time
from dataclasses import dataclass, field
from typing import Optional

import aiohttp
import structlog
from pydantic import ValidationError

from homerunn.config import Settings, get_settings
from homerunn.models import Listing

logger = structlog.get_logger()

# Evita que la API o un proxy devuelvan resultados cacheados
NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


@dataclass
class ListingPage:
    """Página de resultados de la API de listings."""

    listings: list[Listing] = field(default_factory=list)
    next_page_token: Optional[str] = None
    current_page: int = 1

    @property
    def has_more(self) -> bool:
        return self.next_page_token is not None


def parse_listing_page(payload: dict) -> ListingPage:
    """
    Convierte la respuesta JSON de la API en ListingPage.

    Formato esperado: {"value": [...], "pagination": {"nextPageToken", "currentPage"}}
    """
    listings = []
    for raw in payload.get("value") or []:
        try:
            listings.append(Listing.model_validate(raw))
        except ValidationError as e:
            logger.warning("Listing ilegible, se descarta", error=str(e))

    pagination = payload.get("pagination") or {}
    return ListingPage(
        listings=listings,
        next_page_token=pagination.get("nextPageToken") or None,
        current_page=pagination.get("currentPage") or 1,
    )


class ListingsClient:
    """
    Cliente async de la API de listings.

    Uso:
        async with ListingsClient() as client:
            page = await client.fetch_listings(filters)
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.base_url = self.settings.listings_api_url.rstrip("/")
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        timeout = aiohttp.ClientTimeout(total=self.settings.listings_timeout_seconds)
        self._session = aiohttp.ClientSession(
            headers=NO_CACHE_HEADERS, timeout=timeout
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._session:
            await self._session.close()
            self._session = None

    async def fetch_listings(self, filters: Optional[dict] = None) -> ListingPage:
        """
        Pide la primera página de listings.

        Args:
            filters: Filtros de búsqueda. Si trae `listingId`, se busca
                solo esa propiedad e ignora el resto de los filtros.
        """
        timestamp = int(time.time() * 1000)
        if filters and filters.get("listingId"):
            query = {"listingId": filters["listingId"], "_t": timestamp}
            params = {"filters": json.dumps(query)}
        elif filters:
            query = {"_timestamp": timestamp, **filters}
            params = {"filters": json.dumps(query)}
        else:
            params = {"_timestamp": str(timestamp)}

        page = await self._get("getListings", params)
        if filters and filters.get("listingId"):
            # Búsqueda puntual: no hay paginación
            page.next_page_token = None
        return page

    async def fetch_more_listings(self, next_page_token: str) -> ListingPage:
        """Pide la página siguiente a partir del token de paginación."""
        if not next_page_token:
            logger.error("Se pidió otra página sin token de paginación")
            return ListingPage()

        params = {
            "nextPageToken": next_page_token,
            "_timestamp": str(int(time.time() * 1000)),
        }
        return await self._get("getMoreListings", params)

    async def _get(self, endpoint: str, params: dict) -> ListingPage:
        if not self._session:
            raise RuntimeError("Sesión no inicializada. Usa 'async with client:'")

        url = f"{self.base_url}/{endpoint}"
        try:
            async with self._session.get(url, params=params) as response:
                response.raise_for_status()
                payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, json.JSONDecodeError) as e:
            logger.error("Error consultando API de listings", endpoint=endpoint, error=str(e))
            return ListingPage()

        if not isinstance(payload, dict):
            logger.error("Respuesta inesperada de la API de listings", endpoint=endpoint)
            return ListingPage()

        page = parse_listing_page(payload)
        logger.info(
            "Listings obtenidos",
            endpoint=endpoint,
            count=len(page.listings),
            has_more=page.has_more,
        )
        return page
