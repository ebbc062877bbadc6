import yaml
import os
from typing import List, Optional
from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    url: str
    echo: bool = False


class ScoringDefaultsConfig(BaseModel):
    """
    Defaults used when an event has no ScoringPolicy yet.

    The policy row is created lazily the first time a score is
    calculated for the event.
    """
    trim_high_low_from_count: int = 5  # Minimum evaluation count before trimming applies
    trim_count_high: int = 1
    trim_count_low: int = 1
    rounding_decimals: int = 2


class NotificationConfig(BaseModel):
    """
    Configuration for evaluation notifications.

    Events are grouped per competition event and fanned out to the
    listed channels after the originating transaction commits.
    """
    enabled: bool = False
    channels: List[str] = Field(default_factory=lambda: ["log"])  # log, redis, webhook
    webhook_url: Optional[str] = None

    # Redis queue settings
    use_async_queue: bool = False
    redis_url: Optional[str] = None
    queue_name: str = "evaluation-notifications"


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class AppConfig(BaseModel):
    database: DatabaseConfig
    scoring: ScoringDefaultsConfig = Field(default_factory=ScoringDefaultsConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: str = "config.yaml") -> AppConfig:
    # If not found at relative path (e.g. running from another dir), use the repo root copy
    if not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}

    # Allow env var override for DB URL
    env_db_url = os.environ.get("DATABASE_URL")
    if env_db_url:
        if not data.get('database'):
            data['database'] = {}
        data['database']['url'] = env_db_url

    # Allow env var override for Redis URL
    env_redis_url = os.environ.get("REDIS_URL")
    if env_redis_url:
        if not data.get('notifications'):
            data['notifications'] = {}
        data['notifications']['redis_url'] = env_redis_url

    env_log_level = os.environ.get("LOG_LEVEL")
    if env_log_level:
        if not data.get('logging'):
            data['logging'] = {}
        data['logging']['level'] = env_log_level

    return AppConfig(**data)
