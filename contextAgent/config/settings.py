"""Environment-bound configuration objects.

Pydantic BaseSettings groups loaded from the process environment and ``.env``.

Example:
    from contextAgent.config.settings import get_settings

    settings = get_settings()  # Cached singleton
    max_replans = settings.governance.max_plan_iterations
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


load_dotenv()


class ModelSettings(BaseSettings):
    """Chat model identifier and credentials (OpenAI-compatible endpoint).

    DeepSeek and most OpenAI-compatible servers reject ``json_schema``
    response formats, so structured output defaults to tool calling.
    """

    name: str = Field(
        default="deepseek-chat",
        validation_alias=AliasChoices("MODEL_NAME", "MODEL_ID"),
    )
    api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "MODEL_API_KEY"),
    )
    base_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("MODEL_BASE_URL", "OPENAI_BASE_URL"),
    )
    temperature: float = Field(default=0.1, ge=0.0, le=2.0, alias="MODEL_TEMPERATURE")
    structured_output_method: Literal["function_calling", "json_schema", "json_mode"] = Field(
        default="function_calling",
        alias="STRUCTURED_OUTPUT_METHOD",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class GovernanceSettings(BaseSettings):
    """Runtime limits.

    - max_plan_iterations: Orchestrator runs allowed before a ``bad`` verdict gives up
    - step_limit: Hard cap on node executions per run
    - max_tool_rounds: Model calls the runner may make per visit while tools are requested
    """

    max_plan_iterations: int = Field(default=3, ge=1, le=50, alias="MAX_PLAN_ITERATIONS")
    step_limit: int = Field(default=50, ge=1, le=1000, alias="GRAPH_STEP_LIMIT")
    max_tool_rounds: int = Field(default=5, ge=1, le=50, alias="MAX_TOOL_ROUNDS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class PersistenceSettings(BaseSettings):
    """Checkpoint storage.

    Leave CHECKPOINT_DB_PATH unset to keep checkpoints in memory.
    """

    checkpoint_db_path: Optional[str] = Field(default=None, alias="CHECKPOINT_DB_PATH")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class ObservabilitySettings(BaseSettings):
    """Logging configuration."""

    log_dir: str = Field(default="logs", alias="LOG_DIR")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class Settings(BaseSettings):
    """Root application settings.

    Groups:
    - models: Chat model routing and credentials (ModelSettings)
    - governance: Replan budget and step limit (GovernanceSettings)
    - persistence: Checkpoint store location (PersistenceSettings)
    - observability: Logging (ObservabilitySettings)
    """

    environment: str = Field(default="dev", alias="APP_ENV")
    workspace_path: Optional[str] = Field(default=None, alias="AGENT_WORKSPACE_PATH")
    tools_config_path: Optional[str] = Field(default=None, alias="TOOLS_CONFIG_PATH")
    models: ModelSettings = Field(default_factory=ModelSettings)
    governance: GovernanceSettings = Field(default_factory=GovernanceSettings)
    persistence: PersistenceSettings = Field(default_factory=PersistenceSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
        case_sensitive=False,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton Settings instance."""
    return Settings()
