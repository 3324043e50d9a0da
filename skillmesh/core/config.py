"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GOAL_TEMPLATE = (
    'Satisfy the request "{input}", or explain why it cannot be satisfied. '
    "Then pick exactly one renderer from RenderSkills to present the answer."
)


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    # =====================================================================
    # Pydantic Configuration
    # =====================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Logging Configuration
    # =====================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="SKILLMESH_LOG_LEVEL",
    )
    log_format: str = Field(
        default="detailed",
        description="Log record format (simple, detailed, json)",
        alias="SKILLMESH_LOG_FORMAT",
    )
    enable_file_logging: bool = Field(
        default=False,
        description="Also write DEBUG logs to a file under log_file_dir",
        alias="SKILLMESH_ENABLE_FILE_LOGGING",
    )
    log_file_dir: str = Field(
        default="logs",
        description="Directory for the log file when file logging is enabled",
        alias="SKILLMESH_LOG_FILE_DIR",
    )

    # =====================================================================
    # AI Service Configuration
    # =====================================================================
    ai_service_type: str = Field(
        default="openai",
        description="Model provider used for planning and chat (openai, anthropic, google, test, none)",
        alias="SKILLMESH_AI_SERVICE_TYPE",
    )
    completion_model: str = Field(
        default="gpt-4o",
        description="Model name passed to the provider",
        alias="SKILLMESH_COMPLETION_MODEL",
    )

    # =====================================================================
    # Dispatch Configuration
    # =====================================================================
    goal_template: str = Field(
        default=DEFAULT_GOAL_TEMPLATE,
        description="Template turning the user input into the planner goal; must contain '{input}'",
        alias="SKILLMESH_GOAL_TEMPLATE",
    )
    max_plan_steps: int = Field(
        default=8,
        ge=1,
        description="Upper bound on the number of steps a plan may contain",
        alias="SKILLMESH_MAX_PLAN_STEPS",
    )
    fallback_capability: str = Field(
        default="ChatSkill.Chat",
        description="Capability invoked when no actionable plan exists, as Namespace.Name",
        alias="SKILLMESH_FALLBACK_CAPABILITY",
    )
    terminal_renderer: str = Field(
        default="RenderSkills.RenderText",
        description="Renderer whose lone presence makes a plan degenerate, as Namespace.Name",
        alias="SKILLMESH_TERMINAL_RENDERER",
    )
    enabled_integrations: str = Field(
        default="github,jira,graph,klarna",
        description="Comma separated integrations that may be registered when a credential is supplied",
        alias="SKILLMESH_ENABLED_INTEGRATIONS",
    )

    # =====================================================================
    # Monitoring Configuration
    # =====================================================================
    logfire_enabled: bool = Field(
        default=False,
        description="Enable Logfire tracing",
        alias="LOGFIRE_ENABLED",
    )
    logfire_token: Optional[str] = Field(
        default=None,
        description="Logfire write token",
        alias="LOGFIRE_TOKEN",
    )
    logfire_service_name: str = Field(
        default="skillmesh",
        description="Service name reported to Logfire",
        alias="LOGFIRE_SERVICE_NAME",
    )
    logfire_environment: str = Field(
        default="development",
        description="Deployment environment reported to Logfire",
        alias="LOGFIRE_ENVIRONMENT",
    )

    # =====================================================================
    # Computed Properties
    # =====================================================================

    @property
    def integrations(self) -> List[str]:
        """Enabled integration names, normalized and in declaration order."""
        names: List[str] = []
        for raw in self.enabled_integrations.split(","):
            name = raw.strip().lower()
            if name and name not in names:
                names.append(name)
        return names


settings = Settings()
