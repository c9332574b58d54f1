"""
Configuración centralizada del sistema.
Carga variables de entorno y define settings globales.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Encontrar la raíz del proyecto (donde está el .env)
# config.py -> homerunn/ -> src/ -> project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"

# Defaults del pipeline de ranking (usados también fuera de Settings)
DEFAULT_COOLDOWN_SWIPES = 50
DEFAULT_RESPECT_STABLE_CARDS = True

LISTINGS_API_URL = "https://us-central1-homerunn-973b3.cloudfunctions.net"


class Settings(BaseSettings):
    """Configuración principal de la aplicación."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Supabase
    supabase_url: str = Field(..., description="URL del proyecto Supabase")
    supabase_key: str = Field(..., description="Anon key de Supabase")
    supabase_service_key: Optional[str] = Field(
        None, description="Service role key para operaciones admin"
    )
    profiles_table: str = Field(
        "user_match_profiles", description="Tabla donde se guardan los perfiles"
    )
    store_retry_attempts: int = Field(
        3, ge=1, description="Intentos contra Supabase antes de fallar"
    )

    # API de listings
    listings_api_url: str = Field(
        LISTINGS_API_URL, description="URL base de las cloud functions de listings"
    )
    listings_timeout_seconds: float = Field(
        30.0, gt=0, description="Timeout de requests a la API de listings"
    )

    # Ranking
    cooldown_swipes: int = Field(
        DEFAULT_COOLDOWN_SWIPES,
        ge=0,
        description="Swipes que deben pasar antes de volver a mostrar un descartado",
    )
    respect_stable_cards: bool = Field(
        DEFAULT_RESPECT_STABLE_CARDS,
        description="No reordenar cartas ya visibles en el mazo",
    )

    # Logging
    log_level: str = Field("INFO", description="Nivel de logging")


@lru_cache
def get_settings() -> Settings:
    """Obtiene la configuración cacheada."""
    return Settings()
