"""
Configuration de l'application via pydantic-settings.

La configuration est chargee depuis les variables d'environnement avec le
prefixe MEDIATHEQUE_, et peut etre fournie dans un fichier .env.

La cle TMDB est optionnelle : sans elle, le scraping est desactive et les
fichiers restent non identifies.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Parametres de l'application.

    Tous les parametres peuvent etre surcharges via l'environnement.
    Exemples :
        MEDIATHEQUE_LOG_LEVEL=DEBUG
        MEDIATHEQUE_DIRECTORIES='["~/Videos/Films", "~/Videos/Series"]'

    Les chemins sont etendus (~ -> repertoire home).
    """

    model_config = SettingsConfigDict(
        env_prefix="MEDIATHEQUE_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Stockage du catalogue et des posters
    storage_dir: Path = Field(default=Path("~/.local/share/mediatheque"))
    # Repertoires video a scanner
    directories: list[Path] = Field(default_factory=list)
    cache_dir: Path = Field(default=Path("~/.cache/mediatheque"))

    # TMDB (OPTIONNEL - scraping desactive si absent)
    tmdb_api_key: Optional[str] = Field(default=None)
    tmdb_language: str = Field(default="fr-FR")

    # Scraping
    scrape_timeout_seconds: float = Field(default=30.0, gt=0)
    scrape_concurrency: int = Field(default=4, ge=1)

    # Minutes restantes sous lesquelles une video est consideree vue
    watch_threshold_movies: int = Field(default=15, ge=0)
    watch_threshold_episodes: int = Field(default=2, ge=0)

    # Logging (stderr + fichier JSON, rotation 10MB, 5 fichiers de retention)
    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=Path("~/.local/state/mediatheque/mediatheque.log"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator("storage_dir", "cache_dir", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Etend ~ vers le repertoire home dans les chemins."""
        return Path(v).expanduser()

    @field_validator("directories", mode="before")
    @classmethod
    def expand_directories(cls, v: list[str | Path]) -> list[Path]:
        return [Path(path).expanduser() for path in v]

    @property
    def tmdb_enabled(self) -> bool:
        """Verifie si l'API TMDB est configuree."""
        return bool(self.tmdb_api_key)
