"""Configuration and settings"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Google Maps API (Places, Geocoding, Static Maps)
    google_maps_api_key: str = ""
    geocode_default_country: str = "IN"
    default_search_radius: int = 5000

    # Map centre used when no user location is known
    default_center_lat: float = 37.7749
    default_center_lng: float = -122.4194

    # AI provider (OpenAI-compatible endpoint)
    deepseek_api_key: str = ""
    ai_base_url: str = "https://api.deepseek.com/v1"
    ai_model: str = "deepseek-chat"

    # Twilio SMS
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_phone_number: str = ""

    # Supabase persistence
    supabase_url: str = ""
    supabase_key: str = ""

    # Server
    frontend_url: str = "*"
    log_level: str = Field(default="INFO")

    # API Configuration
    api_title: str = "CareFinder API"
    api_version: str = "0.1.0"


# Global settings instance
settings = Settings()
