from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DICEPOOL_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Display defaults used by the CLI when no flag is given.
    default_display: str = "full"
    default_count: int = 1
    chart_samples: int = 10_000
    chart_bar_width: int = 50

    # Pool size limits. Larger pools are rejected at evaluation time.
    max_dice: int = 1000
    max_sides: int = 10_000

    # Upper bound on samples accepted by the HTTP chart route.
    max_samples: int = 100_000

    # Seed for the default random source. Leave unset for system entropy.
    seed: int | None = None

    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        # logging only accepts upper-case level names.
        return value.upper()


settings = Settings()
