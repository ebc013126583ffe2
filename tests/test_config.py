"""
Tests for configuration loading and environment overrides.
"""

import pytest

from swarm_host.config import DEFAULT_MODEL, SwarmConfig, ValidationConfig, load_config
from swarm_host.errors import ConfigurationError


def test_defaults_without_config_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    config = load_config(environ={})

    assert config.server.name == "ASM-Swarm-Host"
    assert config.server.tool_prefix == "execute_"
    assert config.registry.source == "notion"
    assert config.backend.default_model == DEFAULT_MODEL
    assert config.backend.timeout_seconds == 120.0
    assert config.validation.capability_tag_severity == "warning"


def test_explicit_missing_file_raises(tmp_path):
    with pytest.raises(ConfigurationError):
        load_config(str(tmp_path / "missing.yaml"), environ={})


def test_loads_yaml_with_camel_case_keys(tmp_path):
    path = tmp_path / "swarm-host.yaml"
    path.write_text(
        "server:\n"
        "  name: Test Host\n"
        "  toolPrefix: run_\n"
        "registry:\n"
        "  source: file\n"
        "  contractsDir: ./agents\n"
        "  pageSize: 50\n"
        "backend:\n"
        "  defaultModel: gemini-2.5-flash\n"
        "  timeoutSeconds: 30\n"
        "validation:\n"
        "  capabilityTagSeverity: error\n"
        "logging:\n"
        "  level: debug\n"
    )

    config = load_config(str(path), environ={})

    assert config.server.name == "Test Host"
    assert config.server.tool_prefix == "run_"
    assert config.registry.source == "file"
    assert config.registry.contracts_dir == "./agents"
    assert config.registry.page_size == 50
    assert config.backend.default_model == "gemini-2.5-flash"
    assert config.backend.timeout_seconds == 30.0
    assert config.validation.capability_tag_severity == "error"
    assert config.logging.level == "DEBUG"


def test_config_path_from_environment(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text("server:\n  name: From Env\n")

    config = load_config(environ={"SWARM_HOST_CONFIG": str(path)})

    assert config.server.name == "From Env"


def test_environment_overrides(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    config = load_config(environ={
        "NOTION_API_KEY": "secret",
        "NOTION_AGENT_DB_ID": "db-1",
        "GOOGLE_PROJECT_ID": "my-project",
        "GOOGLE_LOCATION": "europe-west4",
        "SWARM_DEFAULT_MODEL": "gemini-2.5-flash",
        "SWARM_CONTRACTS_DIR": "/srv/contracts",
    })

    assert config.registry.notion_api_key == "secret"
    assert config.registry.notion_database_id == "db-1"
    assert config.backend.project_id == "my-project"
    assert config.backend.location == "europe-west4"
    assert config.backend.default_model == "gemini-2.5-flash"
    assert config.registry.contracts_dir == "/srv/contracts"


@pytest.mark.parametrize("content", ["server: [unclosed\n", "- just\n- a list\n"])
def test_invalid_file_raises(tmp_path, content):
    path = tmp_path / "bad.yaml"
    path.write_text(content)

    with pytest.raises(ConfigurationError):
        load_config(str(path), environ={})


def test_invalid_severity():
    with pytest.raises(ConfigurationError):
        ValidationConfig.from_dict({"capability_tag_severity": "fatal"})


def test_unknown_source():
    with pytest.raises(ConfigurationError):
        SwarmConfig.from_dict({"registry": {"source": "postgres"}})
