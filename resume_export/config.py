"""Application configuration."""

import os
from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings


class QueuePolicy(str, Enum):
    """What to do with render requests that arrive at the concurrency ceiling."""

    QUEUE = "queue"
    REJECT = "reject"


def default_surface_ceiling() -> int:
    """Concurrent render surfaces the host can afford, clamped to 5..10."""
    return min(10, max(5, os.cpu_count() or 1))


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False

    # Chrome/Chromium settings
    chrome_binary: str = "/usr/bin/chromium"
    chrome_user_data_base: str = "/tmp/resume-export-profiles"
    devtools_port: int = 9222
    chrome_launch_timeout_seconds: float = 15.0

    # Governor settings
    max_concurrent_surfaces: int = Field(default_factory=default_surface_ceiling, ge=1)
    queue_policy: QueuePolicy = QueuePolicy.QUEUE
    queue_depth: int | None = Field(default=None, ge=0)
    request_timeout_seconds: float = 45.0
    surface_close_timeout_seconds: float = 5.0

    # Front-end render target
    frontend_scheme: str = "http"
    frontend_host: str = "localhost"
    frontend_port: int = 3000
    frontend_resume_path: str = "/resume"
    frontend_banner_path: str = "/"

    # Logo allow-list
    logo_allowed_schemes: list[str] = Field(default_factory=lambda: ["https"])
    logo_allowed_hosts: list[str] = Field(default_factory=list)

    # Export defaults
    default_palette: str = "default"
    default_language: str = "en"

    # Resume projection service
    projection_base_url: str = "http://localhost:4000/internal"
    projection_timeout_seconds: float = 10.0

    # Logging
    log_level: str = "INFO"

    class Config:
        env_prefix = "REX_"
        env_file = ".env"

    @property
    def effective_queue_depth(self) -> int:
        """Queue depth in effect; twice the ceiling unless configured."""
        if self.queue_policy == QueuePolicy.REJECT:
            return 0
        if self.queue_depth is None:
            return 2 * self.max_concurrent_surfaces
        return self.queue_depth


settings = Settings()
