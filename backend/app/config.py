from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Taste vectors
    qloo_api_key: str = ""

    # Site ingest
    scraperapi_key: str = ""

    # Budget: flights/hotels and living costs
    amadeus_api_key: str = ""
    amadeus_api_secret: str = ""
    numbeo_api_key: str = ""

    # Engagement
    youtube_api_key: str = ""
    instagram_access_token: str = ""
    tiktok_client_key: str = ""
    tiktok_client_secret: str = ""

    # POIs / events
    google_places_api_key: str = ""
    ticketmaster_api_key: str = ""

    # Creator discovery
    social_searcher_api_key: str = ""

    # LLMs
    gemini_api_key: str = ""
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    anthropic_model: str = "claude-sonnet-4-5-20250929"
    llm_timeout_seconds: float = 20.0

    # Email delivery
    sendgrid_api_key: str = ""

    # Logging
    log_level: str = "INFO"

    # CORS
    cors_origins: str = "http://localhost:3000"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
