"""Global board settings"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Centralized configuration.
    Reads configs from env variables (prefixed with MSGBOARD_).
    """

    app_name: str = "Message Board"
    host: str = "0.0.0.0"
    server_port: int = 8000
    log_level: str = "INFO"

    # Number of messages returned by GET /messages
    recent_limit: int = 10

    # When set, logins must present this password
    board_password: str | None = None

    session_ttl_seconds: int = 3600

    # Comma separated list of allowed CORS origins
    cors_origins: str = "*"

    model_config = {"env_file": ".env", "env_prefix": "MSGBOARD_"}


settings = Settings()
