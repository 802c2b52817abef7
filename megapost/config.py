"""
Configuration for Megapost

Values come from the process environment; entry points call load_dotenv()
first so a local .env file works too.
"""

import logging
import os
from dataclasses import dataclass
from typing import List, Optional

DEFAULT_MODEL = "gemini-2.5-flash-image"

REQUIRED_VARS = ["GOOGLE_API_KEY"]


def get_api_key() -> Optional[str]:
    """Read the provider API key, accepting API_KEY as a fallback name"""
    return os.getenv("GOOGLE_API_KEY") or os.getenv("API_KEY") or None


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    output_folder: str = "output"
    port: int = 5001
    secret_key: str = "megapost-secret-key-change-in-production"
    fetch_timeout: float = 10.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            api_key=get_api_key(),
            model=os.getenv("MEGAPOST_MODEL", DEFAULT_MODEL),
            output_folder=os.getenv("OUTPUT_FOLDER", "output"),
            port=int(os.getenv("PORT", 5001)),
            secret_key=os.getenv("SECRET_KEY", cls.secret_key),
            fetch_timeout=float(os.getenv("FETCH_TIMEOUT", 10)),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    def missing_credentials(self) -> List[str]:
        """Names of required variables that are not set"""
        return [] if self.api_key else list(REQUIRED_VARS)

    @property
    def credential_notice(self) -> Optional[str]:
        missing = self.missing_credentials()
        if not missing:
            return None
        return (
            f"Missing required environment variables: {', '.join(missing)}. "
            "Set them in your .env file before generating images."
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
