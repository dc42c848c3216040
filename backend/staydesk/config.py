from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Booking backend (rates, promo codes, loyalty, prebook, payments)
    booking_api_base_url: str = "http://localhost:5001/api"
    booking_api_timeout: float = 30.0
    booking_api_max_attempts: int = 3

    # Redis
    redis_url: str = "redis://localhost:6379/0"

    # Auth: tokens are issued by the booking backend, we only read them
    secret_key: str = "change-me-in-production"
    algorithm: str = "HS256"

    # Rates
    rate_cache_ttl: int = 300  # 5 minutes
    default_language: str = "en"

    # Pricing
    default_currency: str = "USD"
    fallback_tax_rate: float = 0.14

    # Loyalty
    loyalty_points_per_dollar: int = 100
    loyalty_min_redeemable_points: int = 100

    # CORS
    cors_origins: str = "http://localhost:3000"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
