"""
Parser Settings
Reads devcontainer parser configuration from the environment (optionally populated from .env)
"""

import os
import logging

VALID_LOG_LEVELS = ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]
TRUE_VALUES = ["1", "true", "yes", "on"]
FALSE_VALUES = ["0", "false", "no", "off"]


class ParserSettings:
    """Environment backed settings for loading and checking devcontainer.json files"""

    DEFAULT_LOG_LEVEL = "INFO"
    SCHEMA_FILE = "devContainer.base.schema.json"

    @staticmethod
    def get_log_level() -> str:
        """Get the configured log level name"""
        level = os.getenv("DEVCONTAINER_LOG_LEVEL", ParserSettings.DEFAULT_LOG_LEVEL).upper()
        if level not in VALID_LOG_LEVELS:
            logging.warning(f"Unsupported log level '{level}'. Defaulting to {ParserSettings.DEFAULT_LOG_LEVEL}")
            return ParserSettings.DEFAULT_LOG_LEVEL
        return level

    @staticmethod
    def get_schema_path() -> str:
        """
        Get the JSON schema used to validate devcontainer.json files
        Falls back to the schema bundled next to this module
        """
        schema_path = os.getenv("DEVCONTAINER_SCHEMA_PATH")
        if schema_path:
            return schema_path
        return os.path.join(os.path.dirname(__file__), ParserSettings.SCHEMA_FILE)

    @staticmethod
    def validate_schema_enabled() -> bool:
        """Whether files are checked against the JSON schema before parsing"""
        value = os.getenv("DEVCONTAINER_VALIDATE_SCHEMA")
        if value is None:
            return True
        value = value.strip().lower()
        if value in TRUE_VALUES:
            return True
        if value in FALSE_VALUES:
            return False
        logging.warning(f"Unrecognized DEVCONTAINER_VALIDATE_SCHEMA value '{value}'. Schema validation stays enabled")
        return True
