"""Configuration loaded from environment variables, and the process default index."""

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_INDEX = "elastic_searchable"

_default_index: str | None = None


def get_default_index() -> str:
    """Return the index used by types that do not name their own.

    Returns:
        The configured default, or DEFAULT_INDEX when none is set.
    """
    return _default_index or DEFAULT_INDEX


def set_default_index(index: str | None) -> None:
    """Replace the process-wide default index.

    Meant to be called once at start-up. Changing it while indexing is in
    flight on other threads gives undefined results. Passing None restores
    DEFAULT_INDEX.

    Args:
        index: New default index name, or None.
    """
    global _default_index
    _default_index = index or None


class Settings(BaseSettings):
    """Configuration loaded from environment variables.

    Attributes:
        host: Bind address for the API server.
        port: Port number for the API server.
        debug: Enable debug mode and API documentation.
        key: API key for authenticating requests.
        cors_origins_raw: Raw comma-separated CORS origins string.
        engine_url: Root URL of the search engine.
        engine_timeout: Seconds before an engine request times out.
        default_index: Index used by record types that do not name one.
    """

    model_config = SettingsConfigDict(
        env_prefix="SEARCHABLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    key: str = ""
    cors_origins_raw: str = ""

    engine_url: str = "http://localhost:9200"
    engine_timeout: float = 10.0
    default_index: str = DEFAULT_INDEX

    @computed_field
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string.

        Returns:
            List of allowed origin URLs.
        """
        return [
            origin.strip()
            for origin in self.cors_origins_raw.split(",")
            if origin.strip()
        ]
