"""
Plan Engine - Configuration Settings
"""
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional


DEFAULT_STEP_DELAY_SECONDS = 0.1
DEFAULT_THINK_DELAY_SECONDS = 0.5


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    value = env.get(name)
    if value is None or value == "":
        return default
    return float(value)


@dataclass
class EngineSettings:
    """Plan execution configuration."""
    step_delay_seconds: float = DEFAULT_STEP_DELAY_SECONDS
    think_delay_seconds: float = DEFAULT_THINK_DELAY_SECONDS
    auto_proceed: bool = True
    pause_on_error: bool = True
    dry_run: bool = False


@dataclass
class LoggingSettings:
    """Logging configuration."""
    level: str = "INFO"
    json_logs: bool = True
    log_file: Optional[str] = None


@dataclass
class ApiSettings:
    """HTTP API configuration."""
    host: str = "0.0.0.0"
    port: int = 8000


@dataclass
class Settings:
    """Main settings container."""
    engine: EngineSettings = field(default_factory=EngineSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    api: ApiSettings = field(default_factory=ApiSettings)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables."""
        env = os.environ if env is None else env
        debug = env.get("APP_ENV", "").lower() in ("development", "dev")

        return cls(
            engine=EngineSettings(
                step_delay_seconds=_env_float(
                    env, "PLAN_ENGINE_STEP_DELAY", DEFAULT_STEP_DELAY_SECONDS
                ),
                think_delay_seconds=_env_float(
                    env, "PLAN_ENGINE_THINK_DELAY", DEFAULT_THINK_DELAY_SECONDS
                ),
                auto_proceed=_env_bool(env, "PLAN_ENGINE_AUTO_PROCEED", True),
                pause_on_error=_env_bool(env, "PLAN_ENGINE_PAUSE_ON_ERROR", True),
                dry_run=_env_bool(env, "PLAN_ENGINE_DRY_RUN", False),
            ),
            logging=LoggingSettings(
                level="DEBUG" if debug else env.get("LOG_LEVEL", "INFO"),
                json_logs=not debug,
                log_file=env.get("LOG_FILE") or None,
            ),
            api=ApiSettings(
                host=env.get("HOST", "0.0.0.0"),
                port=int(env.get("PORT", 8000)),
            ),
        )


# Global settings instance
settings = Settings.from_env()
