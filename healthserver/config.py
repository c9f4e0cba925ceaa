"""Health server configuration — loaded from environment / .env file."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class HealthServerSettings(BaseSettings):
    """Settings for the standalone health server and CLI."""

    model_config = {
        "env_prefix": "HEALTHSERVER_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    # Bind address
    host: str = "0.0.0.0"
    port: int = 8080

    # Endpoints file (absolute or relative to CWD)
    endpoints_file: str = "endpoints.yaml"

    # Seconds to wait for in-flight requests on shutdown
    shutdown_timeout: float = 10.0

    # Logging
    log_level: str = "INFO"

    @property
    def address(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{host}:{self.port}"


settings = HealthServerSettings()
