from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server Configuration
    app_name: str = Field(default="CodeSync Session Hub")
    app_version: str = Field(default="1.0.0")
    app_description: str = Field(
        default="Real-time collaborative code rooms over Socket.IO"
    )

    # Server Host and Port
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000)
    reload: bool = Field(default=False)

    # CORS Configuration
    cors_origins: List[str] = Field(default=["http://localhost:3000"])
    cors_methods: List[str] = Field(default=["GET", "POST"])
    cors_headers: List[str] = Field(default=["*"])
    cors_credentials: bool = Field(default=True)

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Socket.IO Configuration
    socketio_path: str = Field(default="socket.io")
    socketio_namespace: str = Field(default="/")
    # "standard" (hyphenated names) or "legacy" (names used by the first-generation React client)
    event_profile: str = Field(default="standard")
    ping_interval: int = Field(default=25)
    ping_timeout: int = Field(default=20)

    # Code Execution (Judge0 via RapidAPI)
    judge0_url: str = Field(default="https://judge0-ce.p.rapidapi.com")
    judge0_host: str = Field(default="judge0-ce.p.rapidapi.com")
    judge0_api_key: Optional[str] = Field(default=None)
    judge0_poll_attempts: int = Field(default=5)
    judge0_poll_interval: float = Field(default=1.0)

    # AI Assistant (Gemini REST API)
    gemini_api_key: Optional[str] = Field(default=None)
    gemini_model: str = Field(default="gemini-1.5-flash-latest")
    gemini_url: str = Field(default="https://generativelanguage.googleapis.com/v1beta")

    http_timeout: float = Field(default=30.0)

    # Development/Production Mode
    debug: bool = Field(default=False)
    environment: str = Field(default="development")


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance"""
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment variables"""
    global settings
    settings = Settings()
    return settings
