#!/usr/bin/env python3
"""
Check one or more devcontainer.json files: schema validation, decoding and a short summary
"""

import argparse
import json
import logging
import sys
from dotenv import load_dotenv
from helpers.devcontainer_helpers import config_from_json, validate_devcontainer_data
from helpers.parser_settings import ParserSettings
from helpers.union_decoders import DevContainerConfigError, loads

PROVISIONING_KEYS = ["image", "dockerFile", "dockerComposeFile"]


def summarize(config):
    """Summary lines for a decoded config"""
    lines = [f"   Name: {config.name or '(unnamed)'}"]

    provisioning = [key for key in PROVISIONING_KEYS if getattr(config, key)]
    lines.append(f"   Provisioning: {', '.join(provisioning) if provisioning else 'none'}")
    if config.dockerComposeFile:
        lines.append(f"   Compose service: {config.service or '(not set)'}")
    if config.forwardPorts:
        lines.append(f"   Forward ports: {', '.join(config.forwardPorts)}")

    for key, command in config.lifecycle_commands().items():
        lines.append(f"   {key}: {command}")
    return lines


def check_file(path, validate_schema=True):
    """Check a single devcontainer.json, returns True when it decodes"""
    print(f"\n{path}")

    try:
        with open(path, "rb") as config_file:
            raw = loads(config_file.read())
    except OSError as e:
        print(f"   Could not read file: {e}")
        return False
    except json.JSONDecodeError as e:
        print(f"   Invalid JSON: {e}")
        return False

    if validate_schema and not validate_devcontainer_data(raw):
        print("   Schema validation failed")
        return False

    try:
        config = config_from_json(raw, origin=path)
    except DevContainerConfigError as e:
        print(f"   Decoding failed: {e}")
        return False

    for line in summarize(config):
        print(line)
    return True


def main(argv=None):
    load_dotenv()
    logging.basicConfig(
        level=getattr(logging, ParserSettings.get_log_level()),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Check devcontainer.json files")
    parser.add_argument("paths", nargs="+", help="devcontainer.json files to check")
    parser.add_argument(
        "--no-schema",
        action="store_true",
        help="skip JSON schema validation and only decode the files",
    )
    args = parser.parse_args(argv)

    validate_schema = ParserSettings.validate_schema_enabled() and not args.no_schema
    results = [check_file(path, validate_schema=validate_schema) for path in args.paths]

    failed = results.count(False)
    print("\n" + "=" * 60)
    print(f"Checked {len(results)} file(s), {failed} failed")
    print("=" * 60)
    return 0 if failed == 0 else 1


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception as e:
        logging.error(f"Check failed with error: {str(e)}", exc_info=True)
        sys.exit(1)
