"""
Tests for loading, dumping, defaults and schema validation of devcontainer.json
"""

import json
import logging
import pytest
from helpers.devcontainer_helpers import (
    apply_defaults,
    config_from_json,
    dump_devcontainer_json,
    load_devcontainer_config,
    parse_devcontainer_config,
    validate_devcontainer_data,
    validate_devcontainer_json,
)
from helpers.union_decoders import UnsupportedTypeError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ["DEVCONTAINER_LOG_LEVEL", "DEVCONTAINER_SCHEMA_PATH", "DEVCONTAINER_VALIDATE_SCHEMA"]:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def devcontainer_file(tmp_path):
    path = tmp_path / ".devcontainer" / "devcontainer.json"
    path.parent.mkdir()
    path.write_text(json.dumps({
        "name": "app",
        "dockerComposeFile": ["docker-compose.yml", "docker-compose.dev.yml"],
        "string": "app",
        "runServices": ["app", "db"],
        "postCreateCommand": "npm install",
        "forwardPorts": [3000, "5432:5432"],
    }))
    return path


def test_load_sets_origin(devcontainer_file):
    config = load_devcontainer_config(devcontainer_file)

    assert config.origin == str(devcontainer_file)
    assert config.service == "app"
    assert config.dockerComposeFile == ["docker-compose.yml", "docker-compose.dev.yml"]
    assert config.postCreateCommand == ["npm install"]


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_devcontainer_config(tmp_path / "missing.json")


def test_load_logs_path(devcontainer_file, caplog):
    with caplog.at_level(logging.INFO):
        load_devcontainer_config(devcontainer_file)
    assert str(devcontainer_file) in caplog.text


def test_load_propagates_decode_errors(tmp_path):
    path = tmp_path / "devcontainer.json"
    path.write_text('{"postCreateCommand": {"bad": "shape"}}')

    with pytest.raises(UnsupportedTypeError):
        load_devcontainer_config(path)


def test_dump_uses_wire_keys_and_omits_empty(devcontainer_file):
    config = load_devcontainer_config(devcontainer_file)
    dumped = json.loads(dump_devcontainer_json(config))

    assert dumped == {
        "name": "app",
        "dockerComposeFile": ["docker-compose.yml", "docker-compose.dev.yml"],
        "string": "app",
        "runServices": ["app", "db"],
        "postCreateCommand": ["npm install"],
        "forwardPorts": [3000, "5432:5432"],
    }
    assert "origin" not in dumped


def test_dump_empty_config():
    assert json.loads(dump_devcontainer_json(parse_devcontainer_config(b"{}"))) == {}


def test_dump_nested_records_and_port_attributes():
    config = parse_devcontainer_config(json.dumps({
        "build": {"dockerfile": "Dockerfile", "cacheFrom": "img:cache"},
        "hostRequirements": {"cpus": 2},
        "portAttributes": {"3000": {"label": "web"}},
    }))
    dumped = json.loads(dump_devcontainer_json(config))

    assert dumped == {
        "build": {"dockerfile": "Dockerfile", "cacheFrom": ["img:cache"]},
        "hostRequirements": {"cpus": 2},
        "portAttributes": {"3000": {"label": "web"}},
    }


def test_dump_keeps_large_port_numbers():
    config = parse_devcontainer_config(b'{"forwardPorts": [123456789012345678901234567890, "8080:8081"]}')
    text = dump_devcontainer_json(config, indent=None)

    assert "123456789012345678901234567890" in text
    assert json.loads(text)["forwardPorts"] == [123456789012345678901234567890, "8080:8081"]


def test_dump_then_parse_again():
    original = parse_devcontainer_config(json.dumps({
        "image": "ubuntu",
        "appPorts": 8080,
        "postStartCommand": ["git", "pull"],
        "containerEnv": {"A": "b"},
    }))
    reparsed = parse_devcontainer_config(dump_devcontainer_json(original))

    assert reparsed == original


def test_decode_does_not_apply_defaults():
    config = parse_devcontainer_config(b'{"portAttributes": {"3000": {}}}')

    assert config.waitFor is None
    assert config.userEnvProbe is None
    assert config.overrideCommand is None
    assert config.portsAttributes["3000"].label is None
    assert config.portsAttributes["3000"].onAutoForward is None


def test_apply_defaults():
    config = parse_devcontainer_config(
        json.dumps({
            "portAttributes": {"3000": {"label": "web"}},
            "otherPortsAttributes": {"*": {"onAutoForward": "ignore"}},
        }),
        origin="devcontainer.json",
    )
    result = apply_defaults(config)

    assert result.waitFor == "updateContentCommand"
    assert result.userEnvProbe == "loginInteractiveShell"
    assert result.overrideCommand is True
    assert result.portsAttributes["3000"].label == "web"
    assert result.portsAttributes["3000"].onAutoForward == "notify"
    assert result.otherPortsAttributes["*"].label == "Application"
    assert result.otherPortsAttributes["*"].onAutoForward == "ignore"
    assert result.origin == "devcontainer.json"

    # the decoded config itself is left alone
    assert config.waitFor is None
    assert config.portsAttributes["3000"].onAutoForward is None


def test_apply_defaults_keeps_explicit_values():
    config = parse_devcontainer_config(json.dumps({
        "waitFor": "onCreateCommand",
        "userEnvProbe": "none",
        "overrideCommand": False,
    }))
    result = apply_defaults(config)

    assert result.waitFor == "onCreateCommand"
    assert result.userEnvProbe == "none"
    assert result.overrideCommand is False


@pytest.mark.parametrize("document", [
    {},
    {"postCreateCommand": "echo hi"},
    {"postCreateCommand": ["echo", "hi"]},
    {"forwardPorts": [3000, "8080:8081"]},
    {"dockerComposeFile": ["a.yml", "b.yml"], "string": "web"},
    {"appPorts": 3000, "totallyUnknownField": 123},
])
def test_validate_accepts(document):
    assert validate_devcontainer_json(json.dumps(document)) is True


@pytest.mark.parametrize("document", [
    {"postCreateCommand": {"bad": "shape"}},
    {"postCreateCommand": ["echo", 1]},
    {"appPorts": True},
    {"forwardPorts": [True]},
    {"hostRequirements": {"cpus": "4"}},
])
def test_validate_rejects(document):
    assert validate_devcontainer_json(json.dumps(document)) is False


def test_validate_rejects_malformed_json():
    assert validate_devcontainer_json('{"name": ') is False


def test_validate_uses_configured_schema(tmp_path, monkeypatch):
    schema_path = tmp_path / "schema.json"
    schema_path.write_text(json.dumps({"type": "object", "required": ["image"]}))
    monkeypatch.setenv("DEVCONTAINER_SCHEMA_PATH", str(schema_path))

    assert validate_devcontainer_json('{"image": "ubuntu"}') is True
    assert validate_devcontainer_json("{}") is False


def test_dump_writes_number_tokens_verbatim():
    digits = "7" * 5000
    config = parse_devcontainer_config(
        b'{"forwardPorts": [1e400, 3000.50, ' + digits.encode() + b', "8080:8081"]}'
    )
    text = dump_devcontainer_json(config, indent=None)

    assert "Infinity" not in text
    assert text == '{"forwardPorts": [1e400, 3000.50, ' + digits + ', "8080:8081"]}'
    assert parse_devcontainer_config(text).forwardPorts == config.forwardPorts


def test_dump_rejects_non_finite_values():
    config = parse_devcontainer_config(b'{"features": {"x": {"ratio": 1e400}}}')

    with pytest.raises(ValueError):
        dump_devcontainer_json(config)


def test_config_from_json_value():
    config = config_from_json({"postCreateCommand": "echo hi"}, origin="memory")

    assert config.postCreateCommand == ["echo hi"]
    assert config.origin == "memory"
    assert config_from_json(None) == parse_devcontainer_config(b"{}")


def test_validate_parsed_value():
    assert validate_devcontainer_data({"appPorts": 3000}) is True
    assert validate_devcontainer_data({"appPorts": True}) is False
    assert validate_devcontainer_data(None) is True


def test_validate_rejects_non_standard_constants():
    assert validate_devcontainer_json('{"forwardPorts": [NaN]}') is False
