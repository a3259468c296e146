from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    anthropic_api_key: str = ""

    # Used for both text and vision (prescription / food photo) completions
    assistant_model: str = "claude-sonnet-4-5-20250929"
    assistant_max_tokens: int = 1024

    # Anthropic API timeout settings (seconds); expiry falls back to heuristics
    ai_request_timeout: float = 15.0
    ai_connect_timeout: float = 5.0

    # Image attachments
    max_image_bytes: int = 5 * 1024 * 1024  # 5 MiB
    max_image_width: int = 1568  # Longest edge Claude uses without downscaling

    log_level: str = "INFO"

    class Config:
        env_file = ".env"


settings = Settings()
