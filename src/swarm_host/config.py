"""
Swarm Host Configuration - Configuration models and loading.

Configuration is read from YAML and may be overridden by environment
variables so secrets never have to live in the config file.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "swarm-host.yaml"
DEFAULT_MODEL = "gemini-2.5-pro"
SEVERITIES = ("error", "warning", "ignore")
SOURCE_KINDS = ("notion", "file")


def _get(data: dict, snake: str, camel: str, default: Any) -> Any:
    """Read a key in either snake_case or camelCase."""
    return data.get(snake, data.get(camel, default))


@dataclass
class ServerConfig:
    """Protocol server identity and tool naming."""
    name: str = "ASM-Swarm-Host"
    version: str = "1.0.0"
    tool_prefix: str = "execute_"

    @classmethod
    def from_dict(cls, data: dict) -> "ServerConfig":
        return cls(
            name=data.get("name", "ASM-Swarm-Host"),
            version=str(data.get("version", "1.0.0")),
            tool_prefix=_get(data, "tool_prefix", "toolPrefix", "execute_"),
        )


@dataclass
class RegistryConfig:
    """Where agent contracts come from."""
    source: str = "notion"
    notion_api_key: Optional[str] = None
    notion_database_id: Optional[str] = None
    notion_base_url: str = "https://api.notion.com/v1"
    notion_version: str = "2022-06-28"
    contracts_dir: str = "./contracts"
    page_size: int = 100
    max_pages: int = 1000
    timeout_seconds: float = 30.0

    @classmethod
    def from_dict(cls, data: dict) -> "RegistryConfig":
        source = data.get("source", "notion")
        if source not in SOURCE_KINDS:
            raise ConfigurationError(
                f"Unknown registry source: {source}",
                {"supported": list(SOURCE_KINDS)},
            )
        return cls(
            source=source,
            notion_api_key=_get(data, "notion_api_key", "notionApiKey", None),
            notion_database_id=_get(data, "notion_database_id", "notionDatabaseId", None),
            notion_base_url=_get(data, "notion_base_url", "notionBaseUrl", "https://api.notion.com/v1"),
            notion_version=_get(data, "notion_version", "notionVersion", "2022-06-28"),
            contracts_dir=_get(data, "contracts_dir", "contractsDir", "./contracts"),
            page_size=int(_get(data, "page_size", "pageSize", 100)),
            max_pages=int(_get(data, "max_pages", "maxPages", 1000)),
            timeout_seconds=float(_get(data, "timeout_seconds", "timeoutSeconds", 30.0)),
        )


@dataclass
class BackendConfig:
    """Generation backend settings. Generation parameters are fixed per process."""
    project_id: Optional[str] = None
    location: str = "us-central1"
    default_model: str = DEFAULT_MODEL
    temperature: float = 0.2
    max_output_tokens: int = 2048
    timeout_seconds: float = 120.0

    @classmethod
    def from_dict(cls, data: dict) -> "BackendConfig":
        return cls(
            project_id=_get(data, "project_id", "projectId", None),
            location=data.get("location", "us-central1"),
            default_model=_get(data, "default_model", "defaultModel", DEFAULT_MODEL),
            temperature=float(data.get("temperature", 0.2)),
            max_output_tokens=int(_get(data, "max_output_tokens", "maxOutputTokens", 2048)),
            timeout_seconds=float(_get(data, "timeout_seconds", "timeoutSeconds", 120.0)),
        )


@dataclass
class ValidationConfig:
    """Business-rule knobs for contract validation."""
    capability_tag: str = "MCP-Swarm"
    recursion_tag: str = "RCOP"
    capability_tag_severity: str = "warning"

    @classmethod
    def from_dict(cls, data: dict) -> "ValidationConfig":
        severity = _get(data, "capability_tag_severity", "capabilityTagSeverity", "warning")
        if severity not in SEVERITIES:
            raise ConfigurationError(
                f"Invalid capability tag severity: {severity}",
                {"supported": list(SEVERITIES)},
            )
        return cls(
            capability_tag=_get(data, "capability_tag", "capabilityTag", "MCP-Swarm"),
            recursion_tag=_get(data, "recursion_tag", "recursionTag", "RCOP"),
            capability_tag_severity=severity,
        )


@dataclass
class TracingConfig:
    """OpenTelemetry settings."""
    enabled: bool = False
    service_name: str = "swarm-host"

    @classmethod
    def from_dict(cls, data: dict) -> "TracingConfig":
        return cls(
            enabled=bool(data.get("enabled", False)),
            service_name=_get(data, "service_name", "serviceName", "swarm-host"),
        )


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"

    @classmethod
    def from_dict(cls, data: dict) -> "LoggingConfig":
        return cls(level=str(data.get("level", "INFO")).upper())


@dataclass
class SwarmConfig:
    """
    Main swarm host configuration.

    Groups the protocol server, contract registry, generation backend,
    validation rules, tracing and logging settings.
    """
    server: ServerConfig = field(default_factory=ServerConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    backend: BackendConfig = field(default_factory=BackendConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "SwarmConfig":
        """Create config from dictionary."""
        return cls(
            server=ServerConfig.from_dict(data.get("server") or {}),
            registry=RegistryConfig.from_dict(data.get("registry") or {}),
            backend=BackendConfig.from_dict(data.get("backend") or {}),
            validation=ValidationConfig.from_dict(data.get("validation") or {}),
            tracing=TracingConfig.from_dict(data.get("tracing") or {}),
            logging=LoggingConfig.from_dict(data.get("logging") or {}),
        )

    def apply_env(self, environ: Optional[dict[str, str]] = None) -> "SwarmConfig":
        """Override settings from environment variables."""
        env = os.environ if environ is None else environ

        if env.get("NOTION_API_KEY"):
            self.registry.notion_api_key = env["NOTION_API_KEY"]
        if env.get("NOTION_AGENT_DB_ID"):
            self.registry.notion_database_id = env["NOTION_AGENT_DB_ID"]
        if env.get("SWARM_CONTRACTS_DIR"):
            self.registry.contracts_dir = env["SWARM_CONTRACTS_DIR"]
        if env.get("GOOGLE_PROJECT_ID"):
            self.backend.project_id = env["GOOGLE_PROJECT_ID"]
        if env.get("GOOGLE_LOCATION"):
            self.backend.location = env["GOOGLE_LOCATION"]
        if env.get("SWARM_DEFAULT_MODEL"):
            self.backend.default_model = env["SWARM_DEFAULT_MODEL"]

        return self


def load_config(
    config_path: Optional[str] = None,
    environ: Optional[dict[str, str]] = None,
) -> SwarmConfig:
    """
    Load swarm host configuration from a YAML file.

    Args:
        config_path: Path to config file (defaults to $SWARM_HOST_CONFIG,
            then ./swarm-host.yaml)
        environ: Environment mapping used for overrides (defaults to os.environ)

    Returns:
        SwarmConfig with environment overrides applied
    """
    env = os.environ if environ is None else environ

    if config_path is None:
        config_path = env.get("SWARM_HOST_CONFIG", DEFAULT_CONFIG_FILE)
        if not Path(config_path).exists():
            logger.warning("No config file found, using defaults")
            return SwarmConfig().apply_env(env)
    elif not Path(config_path).exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")

    logger.info(f"Loaded config from {config_path}")
    return SwarmConfig.from_dict(data).apply_env(env)
