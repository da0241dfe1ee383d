from functools import lru_cache
from pathlib import Path
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG, DATA_DIR, DB_FILENAME, NUMBER_LOCALE).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Household Finance"
    debug: bool = False
    version: str = "0.1.0"

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "household.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided

    # Currencies / rates
    default_rate_type: str = "manual"
    fallback_primary_currency: str = "ARS"
    reference_currency: str = "USD"
    number_locale: str = "es-AR"
    # Attached to every new household; first entry becomes primary
    starter_currencies: List[str] = ["ARS", "USD"]

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        if not self.starter_currencies:
            raise ValueError("starter_currencies must list at least one currency")
        self.fallback_primary_currency = self.fallback_primary_currency.upper()
        self.reference_currency = self.reference_currency.upper()
        self.starter_currencies = [c.upper() for c in self.starter_currencies]


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
