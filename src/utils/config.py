"""Configuration management for Recipe Matcher.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import os
from typing import Optional

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Hosted store base URL. Used for the remote search function and the
        # hosted recipe catalog. When unset, only the bundled catalog is used.
        self.SUPABASE_URL: Optional[str] = os.getenv("SUPABASE_URL") or None
        # Bearer key sent with remote search and catalog requests
        self.SUPABASE_ANON_KEY: str = os.getenv("SUPABASE_ANON_KEY", "")
        # Remote search: attempt the remote path before local matching
        self.USE_REMOTE_SEARCH: bool = _env_bool("USE_REMOTE_SEARCH", "true")
        self.SEARCH_FUNCTION_PATH: str = os.getenv("SEARCH_FUNCTION_PATH", "/functions/v1/search-by-ingredients")
        # Bounded wait for the remote path before falling back (seconds). Default: 3
        self.REMOTE_SEARCH_TIMEOUT: float = float(os.getenv("REMOTE_SEARCH_TIMEOUT", "3.0"))
        # HTTP client timeout for a single remote request (seconds). Default: 5
        self.REMOTE_REQUEST_TIMEOUT: float = float(os.getenv("REMOTE_REQUEST_TIMEOUT", "5.0"))
        # Bundled static catalog, also the fallback when the hosted store is unreachable
        self.RECIPES_FILE: str = os.getenv("RECIPES_FILE", "data/recipes.json")
        # Maximum number of ranked recipes returned per query (1-100). Default: 100
        self.MAX_RESULTS: int = int(os.getenv("MAX_RESULTS", "100"))
        # Score denominators: "query" = selected ingredient count, "recipe" = recipe ingredient count
        self.LOCAL_SCORE_FORMULA: str = os.getenv("LOCAL_SCORE_FORMULA", "query").lower()
        self.SEARCH_SCORE_FORMULA: str = os.getenv("SEARCH_SCORE_FORMULA", "recipe").lower()
        # Synonym expansion: "one-hop" walks the table once in each direction,
        # "transitive" merges every connected synonym group at load time
        self.SYNONYM_EXPANSION: str = os.getenv("SYNONYM_EXPANSION", "one-hop").lower()
        # Add substring-related ingredient keys to candidate retrieval so partial
        # matches ("tomat" -> "tomato") stay reachable on the local path
        self.RETRIEVE_PARTIAL_MATCHES: bool = _env_bool("RETRIEVE_PARTIAL_MATCHES", "true")
        # HTTP server bind
        self.HOST: str = os.getenv("HOST", "0.0.0.0")
        self.PORT: int = int(os.getenv("PORT", "7777"))

    @property
    def remote_search_url(self) -> Optional[str]:
        """Full URL of the remote search function, or None when no store is configured."""
        if not self.SUPABASE_URL:
            return None
        return f"{self.SUPABASE_URL.rstrip('/')}/{self.SEARCH_FUNCTION_PATH.lstrip('/')}"

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If any value is out of range or not one of the allowed options.
        """
        for name in ("LOCAL_SCORE_FORMULA", "SEARCH_SCORE_FORMULA"):
            value = getattr(self, name)
            if value not in ("query", "recipe"):
                raise ValueError(f"{name} must be 'query' or 'recipe', got: {value}")
        if self.SYNONYM_EXPANSION not in ("one-hop", "transitive"):
            raise ValueError(
                f"SYNONYM_EXPANSION must be 'one-hop' or 'transitive', got: {self.SYNONYM_EXPANSION}"
            )
        if self.REMOTE_SEARCH_TIMEOUT <= 0:
            raise ValueError(f"REMOTE_SEARCH_TIMEOUT must be positive, got: {self.REMOTE_SEARCH_TIMEOUT}")
        if self.REMOTE_REQUEST_TIMEOUT <= 0:
            raise ValueError(f"REMOTE_REQUEST_TIMEOUT must be positive, got: {self.REMOTE_REQUEST_TIMEOUT}")
        if not (1 <= self.MAX_RESULTS <= 100):
            raise ValueError(f"MAX_RESULTS must be between 1 and 100, got: {self.MAX_RESULTS}")
        if self.SUPABASE_URL and not self.SUPABASE_URL.startswith(("http://", "https://")):
            raise ValueError(f"SUPABASE_URL must be an http(s) URL, got: {self.SUPABASE_URL}")


# Create module-level config instance and validate immediately
config = Config()
config.validate()
