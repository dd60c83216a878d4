"""Pydantic configuration models for mindjournal."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

VALID_LLM_PROVIDERS = {"auto", "gemini", "claude", "openai"}
VALID_ENVIRONMENTS = {"development", "production", "test"}
VALID_EXAMPLE_ORDERS = {"confidence", "chronological"}


class LLMConfig(BaseModel):
    """LLM provider configuration."""

    provider: str = "auto"
    model: Optional[str] = None  # None = use provider default
    api_key: Optional[str] = None
    max_tokens: int = 2048
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        if v not in VALID_LLM_PROVIDERS:
            raise ValueError(f"Invalid LLM provider: {v}. Must be one of {VALID_LLM_PROVIDERS}")
        return v


class PathsConfig(BaseModel):
    """File paths configuration."""

    db: Path = Path("~/mindjournal/journal.db")
    users_db: Path = Path("~/mindjournal/users.db")
    log_file: Path = Path("~/mindjournal/mindjournal.log")
    export_dir: Path = Path("~/mindjournal/exports")

    @model_validator(mode="after")
    def expand_paths(self):
        """Expand ~ in all paths."""
        self.db = self.db.expanduser()
        self.users_db = self.users_db.expanduser()
        self.log_file = self.log_file.expanduser()
        self.export_dir = self.export_dir.expanduser()
        return self


class AnalyticsConfig(BaseModel):
    """Aggregation windows and presentation knobs."""

    default_days: int = Field(default=30, ge=1)
    dashboard_days: int = Field(default=7, ge=1)
    max_days: int = Field(default=365, ge=1)
    example_limit: int = Field(default=3, ge=0, le=20)
    example_order: str = "confidence"
    # IANA zone used to decide which calendar day an entry belongs to
    timezone: str = "UTC"

    @field_validator("example_order")
    @classmethod
    def validate_example_order(cls, v: str) -> str:
        if v not in VALID_EXAMPLE_ORDERS:
            raise ValueError(f"example_order must be one of {VALID_EXAMPLE_ORDERS}")
        return v

    @model_validator(mode="after")
    def validate_defaults(self):
        if self.default_days > self.max_days:
            raise ValueError("default_days cannot exceed max_days")
        return self


class AnalysisConfig(BaseModel):
    """Entry analysis behaviour."""

    recent_minutes: int = Field(default=60, ge=0)
    batch_limit: int = Field(default=5, ge=1, le=50)
    batch_delay: float = Field(default=1.0, ge=0.0)
    max_attempts: int = Field(default=3, ge=1, le=10)
    min_mood_text: int = 10


class ServerConfig(BaseModel):
    environment: str = "production"
    frontend_origin: str = "http://localhost:3000"
    ai_daily_limit: int = 50
    ai_burst_interval: float = 2.0

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        if v not in VALID_ENVIRONMENTS:
            raise ValueError(f"environment must be one of {VALID_ENVIRONMENTS}")
        return v


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_mode: bool = Field(default=False, alias="json")

    model_config = {"populate_by_name": True}


class MindJournalConfig(BaseModel):
    """Root configuration."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def is_development(self) -> bool:
        return self.server.environment == "development"

    @classmethod
    def from_dict(cls, data: dict) -> "MindJournalConfig":
        return cls.model_validate(data or {})

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
