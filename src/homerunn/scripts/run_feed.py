"""
Script para armar el feed de un usuario desde la terminal.

Toma un batch de listings (de un archivo JSON o de la API), carga el
perfil del usuario y muestra el feed filtrado y ordenado.

Uso:
    python -m homerunn.scripts.run_feed --user-id <uuid>
    python -m homerunn.scripts.run_feed --user-id <uuid> --listings-file batch.json --ranked
    python -m homerunn.scripts.run_feed --user-id <uuid> --filters '{"beds": ["3"]}' --describe
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import structlog

from homerunn.config import get_settings
from homerunn.listings import ListingsClient, parse_listing_page
from homerunn.matching import MatchingEngine, describe_signature
from homerunn.models import Listing

# Configurar logging
settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(message)s",
    force=True,
)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


def _load_listings_file(path: Path) -> list[Listing]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, list):
        payload = {"value": payload}
    return parse_listing_page(payload).listings


async def run_feed(
    user_id: str,
    listings_file: Optional[Path] = None,
    filters: Optional[dict] = None,
    ranked: bool = False,
    describe: bool = False,
) -> int:
    """Arma e imprime el feed. Devuelve el exit code."""
    if listings_file:
        listings = _load_listings_file(listings_file)
    else:
        async with ListingsClient() as client:
            page = await client.fetch_listings(filters)
        listings = page.listings

    if not listings:
        logger.info("No hay listings para rankear", user_id=user_id)
        return 0

    engine = MatchingEngine()
    results = await engine.build_feed(
        user_id, listings, respect_stable_cards=not ranked
    )

    print(f"\n=== FEED ({len(results)}/{len(listings)}) ===")
    for position, result in enumerate(results, start=1):
        print(
            f"{position:>3}. {result.listing_id or '-':<20} "
            f"firma={result.signature} match={result.match_score:>3} "
            f"similitud={result.similarity:>3}"
        )

    if describe:
        profile = await engine.profile_repo.get_profile(user_id)
        if profile is None:
            print("\nEl usuario todavía no tiene perfil.")
        else:
            print(f"\n=== PERFIL {profile.current_signature} ===")
            for slot, label in describe_signature(profile.signature).items():
                print(f"- {slot}: {label}")

    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Arma el feed de swipes de un usuario"
    )
    parser.add_argument("--user-id", required=True, help="UUID del usuario")
    parser.add_argument(
        "--listings-file",
        type=Path,
        help="JSON con listings (lista o respuesta de la API); sin esto se consulta la API",
    )
    parser.add_argument(
        "--filters",
        type=json.loads,
        default=None,
        help="Filtros JSON para la API de listings",
    )
    parser.add_argument(
        "--ranked",
        action="store_true",
        help="Ordenar por match score (por defecto conserva el orden de las cartas)",
    )
    parser.add_argument(
        "--describe",
        action="store_true",
        help="Muestra la firma del usuario en lenguaje natural",
    )

    args = parser.parse_args()

    try:
        exit_code = asyncio.run(
            run_feed(
                user_id=args.user_id,
                listings_file=args.listings_file,
                filters=args.filters,
                ranked=args.ranked,
                describe=args.describe,
            )
        )
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Feed interrumpido por usuario")
        sys.exit(130)
    except Exception as e:
        logger.error("Error fatal armando el feed", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
