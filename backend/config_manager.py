"""
Configuration Manager for ISC DHCP Scope Converter
Loads KEY=VALUE settings and checks them against config_schema.json
"""

import os
import json
import logging
from typing import Dict, List, Any

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = '/etc/isc-dhcp-converter/config.conf'
DEFAULT_SCHEMA_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'config_schema.json')


def _check_integer(key: str, value: str, props: Dict[str, Any]) -> List[str]:
    try:
        number = int(value)
    except ValueError:
        return [f"{key} must be an integer"]

    if number < props.get('minimum', number):
        return [f"{key} must be at least {props['minimum']}"]
    if number > props.get('maximum', number):
        return [f"{key} must be at most {props['maximum']}"]
    return []


def _check_boolean(key: str, value: str, props: Dict[str, Any]) -> List[str]:
    if value.lower() in ('true', 'false'):
        return []
    return [f"{key} must be 'true' or 'false'"]


def _check_string(key: str, value: str, props: Dict[str, Any]) -> List[str]:
    errors = []
    # LOGGING_PATH and DHCP_CONFIG_PATH are opened by the service, never relative
    if props.get('format') == 'path' and not os.path.isabs(value):
        errors.append(f"{key} must be an absolute path (start with /)")
    if 'enum' in props and value not in props['enum']:
        errors.append(f"{key} must be one of: {', '.join(props['enum'])}")
    return errors


FIELD_CHECKS = {
    'integer': _check_integer,
    'boolean': _check_boolean,
    'string': _check_string,
}


class ConfigManager:
    """Application settings for the converter API and gunicorn workers"""

    def __init__(self, config_path=DEFAULT_CONFIG_PATH, schema_path=None):
        self.config_path = config_path
        self.schema_path = schema_path or DEFAULT_SCHEMA_PATH
        self.schema = self._load_schema()

    def _load_schema(self) -> Dict[str, Any]:
        try:
            with open(self.schema_path, 'r') as f:
                return json.load(f)
        except FileNotFoundError:
            raise FileNotFoundError(f"Schema file not found: {self.schema_path}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid schema JSON in {self.schema_path}: {e}")

    def read_config(self) -> Dict[str, str]:
        """
        Read KEY=VALUE pairs from the settings file

        Blank lines, '#' comments and lines without '=' are ignored.

        Raises:
            FileNotFoundError: If the settings file does not exist
        """
        try:
            with open(self.config_path, 'r') as f:
                lines = f.read().splitlines()
        except FileNotFoundError:
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")
        except OSError as e:
            raise IOError(f"Failed to read config file {self.config_path}: {e}")

        settings = {}
        for line in lines:
            line = line.strip()
            if line.startswith('#'):
                continue
            key, sep, value = line.partition('=')
            if sep and key.strip():
                settings[key.strip()] = value.strip()

        logger.debug(f"Read {len(settings)} settings from {self.config_path}")
        return settings

    def get_defaults(self) -> Dict[str, str]:
        """Default values declared in the schema"""
        return {
            key: str(props['default'])
            for key, props in self.schema.get('properties', {}).items()
            if 'default' in props
        }

    def load(self) -> Dict[str, str]:
        """Read settings merged over schema defaults and validate them"""
        config = self.get_defaults()
        config.update(self.read_config())

        errors = self.validate_config(config)
        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        return config

    def validate_config(self, config: Dict[str, str]) -> List[str]:
        """Return one message per setting that breaks the schema"""
        properties = self.schema.get('properties', {})
        errors = [f"{key} is required" for key in self.schema.get('required', []) if not config.get(key)]

        # Keys the schema does not describe are passed through unchecked
        for key, value in config.items():
            props = properties.get(key)
            check = FIELD_CHECKS.get(props.get('type')) if props else None
            if check:
                errors.extend(check(key, value, props))

        return errors
