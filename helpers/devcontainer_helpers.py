# helpers/devcontainer_helpers.py

import json
import logging
import re
import uuid
import jsonschema
from pydantic import ValidationError
from helpers.parser_settings import ParserSettings
from helpers.union_decoders import (
    InvalidConfigError,
    UnsupportedTypeError,
    loads,
)
from schemas import (
    DEFAULT_ON_AUTO_FORWARD,
    DEFAULT_OVERRIDE_COMMAND,
    DEFAULT_PORT_LABEL,
    DEFAULT_USER_ENV_PROBE,
    DEFAULT_WAIT_FOR,
    DevContainerConfig,
)


def _location(loc):
    return ".".join(str(part) for part in loc)


def _decode_error(exc: ValidationError):
    """Turn a pydantic ValidationError into the matching devcontainer error"""
    errors = exc.errors()
    for error in errors:
        location = _location(error["loc"])
        cause = error.get("ctx", {}).get("error")
        if isinstance(cause, UnsupportedTypeError):
            return cause.with_location(location)
        if error["type"] == "value_error" and "unsupported type" in error["msg"]:
            return UnsupportedTypeError(error.get("input"), location)

    details = "; ".join(f"{_location(e['loc']) or '<root>'}: {e['msg']}" for e in errors)
    return InvalidConfigError(f"invalid devcontainer config: {details}")


def config_from_json(raw, origin=None):
    """
    Build a DevContainerConfig from an already parsed JSON value.
    A top-level null decodes like {}.
    """
    if raw is None:
        raw = {}

    try:
        config = DevContainerConfig.model_validate(raw)
    except ValidationError as e:
        error = _decode_error(e)
        logging.debug(f"Decoding failed: {error}")
        raise error from e

    config._origin = origin
    return config


def parse_devcontainer_config(data, origin=None):
    """
    Decode raw devcontainer.json bytes (or text) into a DevContainerConfig.

    json.JSONDecodeError propagates unchanged for malformed JSON.
    UnsupportedTypeError is raised when a string-or-array field holds another shape,
    InvalidConfigError when any other field has the wrong type.
    """
    raw = loads(data)
    logging.debug(f"Decoding devcontainer config from {origin or '<memory>'}")
    return config_from_json(raw, origin=origin)


def load_devcontainer_config(path):
    """Read a devcontainer.json from disk, the path is kept as the config origin"""
    logging.info(f"Loading devcontainer.json from {path}")
    with open(path, "rb") as config_file:
        data = config_file.read()
    return parse_devcontainer_config(data, origin=str(path))


# Nested records whose empty keys are also left out when dumping
NESTED_RECORDS = ("build", "hostRequirements")

JSON_NUMBER = re.compile(r"-?(0|[1-9][0-9]*)(\.[0-9]+)?([eE][+-]?[0-9]+)?")


def _is_empty(value):
    return value is None or value == [] or value == {}


def _omit_empty(data):
    return {key: value for key, value in data.items() if not _is_empty(value)}


def dump_devcontainer_json(config, indent=2):
    """
    Serialize a DevContainerConfig back into devcontainer.json text.
    Numeric forwardPorts tokens are written back as JSON numbers with their original digits.
    """
    data = config.model_dump(by_alias=True, exclude_none=True)
    for key in NESTED_RECORDS:
        if key in data:
            data[key] = _omit_empty(data[key])

    # numeric tokens go out as placeholders and are swapped for their literal text afterwards
    marker = uuid.uuid4().hex
    literals = {}
    if data.get("forwardPorts"):
        ports = []
        for port in data["forwardPorts"]:
            if JSON_NUMBER.fullmatch(port):
                placeholder = f"{marker}-{len(literals)}"
                literals[json.dumps(placeholder)] = port
                port = placeholder
            ports.append(port)
        data["forwardPorts"] = ports

    text = json.dumps(_omit_empty(data), indent=indent, allow_nan=False)
    for placeholder, literal in literals.items():
        text = text.replace(placeholder, literal)
    return text


def apply_defaults(config):
    """
    Return a copy of the config with the documented defaults filled in.
    Decoding never does this on its own, absent values stay None.
    """
    updates = {}
    if config.waitFor is None:
        updates["waitFor"] = DEFAULT_WAIT_FOR
    if config.userEnvProbe is None:
        updates["userEnvProbe"] = DEFAULT_USER_ENV_PROBE
    if config.overrideCommand is None:
        updates["overrideCommand"] = DEFAULT_OVERRIDE_COMMAND

    for field in ("portsAttributes", "otherPortsAttributes"):
        attributes = getattr(config, field)
        if attributes:
            updates[field] = {
                port: _port_attribute_defaults(attribute) for port, attribute in attributes.items()
            }

    result = config.model_copy(update=updates)
    result._origin = config.origin
    return result


def _port_attribute_defaults(attribute):
    updates = {}
    if attribute.onAutoForward is None:
        updates["onAutoForward"] = DEFAULT_ON_AUTO_FORWARD
    if attribute.label is None:
        updates["label"] = DEFAULT_PORT_LABEL
    return attribute.model_copy(update=updates)


def _load_schema():
    schema_path = ParserSettings.get_schema_path()
    with open(schema_path, "r") as schema_file:
        return json.load(schema_file)


def validate_devcontainer_data(parsed_json):
    """Validate an already parsed devcontainer.json value against the JSON schema"""
    logging.info("Validating devcontainer.json...")
    schema = _load_schema()
    try:
        logging.debug("Running validation...")
        jsonschema.validate(instance=parsed_json, schema=schema)
        logging.info("Validation successful.")
        return True
    except jsonschema.exceptions.ValidationError as e:
        logging.error(f"Schema validation failed: {e.message}")
        logging.error(f"Failed at path: {list(e.path)}")
        logging.error(f"Schema path: {list(e.schema_path)}")
        logging.error(f"Validator: {e.validator}")
        return False


def validate_devcontainer_json(devcontainer_json):
    try:
        parsed_json = loads(devcontainer_json)
    except json.JSONDecodeError as e:
        logging.error(f"JSON parsing failed: {e}")
        logging.error(f"Invalid JSON content: {str(devcontainer_json)[:500]}")
        return False
    return validate_devcontainer_data(parsed_json)
