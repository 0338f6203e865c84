"""Engine and model settings.

Settings are plain Pydantic models. `EngineSettings.from_env()` loads a `.env`
file when present and reads `RELAYGRAPH_*` variables on top of the defaults.
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from relaygraph.core.logging import RelayLoggingConfig, VerbosityLevel


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class ModelSettings(BaseModel):
    """Settings for the LLM-backed invocation port.

    Attributes:
        model: OpenAI model name
        temperature: Default sampling temperature
        max_tokens: Default completion limit
        max_tool_rounds: Maximum tool-call round trips per invocation
        retry_attempts: Attempts per provider call before giving up
    """
    model: str = "gpt-4o-mini"
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    max_tool_rounds: int = Field(default=10, ge=1)
    retry_attempts: int = Field(default=3, ge=1)


class EngineSettings(BaseModel):
    """Engine-wide settings.

    Attributes:
        strict_initial_values: Reject unknown initial-value keys instead of ignoring them
        max_node_visits: Per-run cap on how often a single node may execute
        default_agent_timeout: Seconds allowed per agent invocation in patterns
        global_timeout: Seconds allowed for a whole pattern execution
        research_max_iterations: Iteration cap for the deep-research loop
        research_quality_threshold: Score that ends the deep-research loop
        logging: Logging verbosity
    """
    strict_initial_values: bool = False
    max_node_visits: int = Field(default=25, ge=1)
    default_agent_timeout: float = Field(default=60.0, gt=0)
    global_timeout: float = Field(default=300.0, gt=0)
    research_max_iterations: int = Field(default=3, ge=1)
    research_quality_threshold: int = Field(default=80, ge=0, le=100)
    logging: RelayLoggingConfig = Field(default_factory=RelayLoggingConfig)

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "EngineSettings":
        """Build settings from the environment.

        Args:
            dotenv_path: Optional explicit `.env` file to load first

        Returns:
            EngineSettings with environment overrides applied
        """
        load_dotenv(dotenv_path)
        defaults = cls()

        level_name = os.getenv("RELAYGRAPH_LOG_LEVEL")
        logging_config = RelayLoggingConfig()
        if level_name:
            logging_config.level = VerbosityLevel[level_name.strip().upper()]

        return cls(
            strict_initial_values=_env_bool(
                "RELAYGRAPH_STRICT_INITIAL_VALUES", defaults.strict_initial_values
            ),
            max_node_visits=int(os.getenv("RELAYGRAPH_MAX_NODE_VISITS", defaults.max_node_visits)),
            default_agent_timeout=float(
                os.getenv("RELAYGRAPH_AGENT_TIMEOUT", defaults.default_agent_timeout)
            ),
            global_timeout=float(os.getenv("RELAYGRAPH_GLOBAL_TIMEOUT", defaults.global_timeout)),
            research_max_iterations=int(
                os.getenv("RELAYGRAPH_RESEARCH_MAX_ITERATIONS", defaults.research_max_iterations)
            ),
            research_quality_threshold=int(
                os.getenv("RELAYGRAPH_RESEARCH_THRESHOLD", defaults.research_quality_threshold)
            ),
            logging=logging_config,
        )
