from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "CardReveal"
    debug: bool = False

    loyalty_api_url: str = "http://localhost:5000/api"
    loyalty_api_token: str = ""

    # Reveal animation timing, in milliseconds
    reveal_fast_tick_ms: int = 100
    reveal_fast_duration_ms: int = 2000
    reveal_slow_tick_ms: int = 200
    reveal_slow_duration_ms: int = 1000
    reveal_complete_delay_ms: int = 1000
    reveal_single_complete_delay_ms: int = 500


settings = Settings()


# =============================================================================
# QUERY CACHE KEYS
# =============================================================================

# Catalog of every known card design
COLLECTIBLES_QUERY = "collectibles"

# User profile, carries the coin balance
PROFILE_QUERY = "profile"

REWARDS_QUERY = "rewards"

# Invalidated once a reveal completes
POST_REVEAL_QUERIES: tuple[str, ...] = (COLLECTIBLES_QUERY, PROFILE_QUERY)
