"""
Fuente de listings.

Cliente de la API de listings del MLS.
"""

from homerunn.listings.client import ListingsClient, ListingPage, parse_listing_page

__all__ = [
    "ListingsClient",
    "ListingPage",
    "parse_listing_page",
]
