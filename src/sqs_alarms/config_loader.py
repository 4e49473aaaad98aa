import json
from os import path
from pathlib import Path
from typing import Any, Literal, Mapping, Optional, TypedDict

import jsonschema
import yaml

from .models import PluginSettings

# constants
SETTINGS_KEY = "sqs-alarms"
DEFAULT_CONFIG_FILES = [
    "sqs-alarms.yaml",
    "sqs-alarms.yml",
    "sqs-alarms.json",
]
SCHEMA_FILE = Path(__file__).parent / "config_schema.json"


class ConfigFile(TypedDict):
    """Config File

    Args:
        TypedDict (_type_): typed dict
    """

    FilePath: str
    Type: Literal["json", "yaml"]


def load(file_path: Optional[str]) -> Optional[PluginSettings]:
    """Loads the `sqs-alarms` settings from specified file path

    The settings are looked up under `custom.sqs-alarms` (as in a deployment
    project file) first, then under a top-level `sqs-alarms` key.

    Args:
        file_path (str): file path, or None if use the default config

    Returns:
        Optional[PluginSettings]: settings dict, or None if the file has no settings
    """
    config_file = _resolve_file_path(file_path)
    with open(config_file["FilePath"], "r") as f:
        if config_file["Type"] == "json":
            config = json.load(f)
        else:
            config = yaml.safe_load(f)

    settings = find_settings(config)
    if settings is None:
        return None

    jsonschema.validate(settings, get_schema())
    return _merge_dicts(default_config(), settings)  # type: ignore


def get_schema() -> dict[str, Any]:
    """Gets the JSON schema of the `sqs-alarms` settings

    Returns:
        dict[str, Any]: schema dict
    """
    with open(SCHEMA_FILE, "r") as f:
        schema = json.load(f)
    assert isinstance(schema, dict)
    return schema


def find_settings(config: Any) -> Optional[Mapping[str, Any]]:
    """Finds the `sqs-alarms` settings in a loaded config

    Args:
        config (Any): loaded config

    Returns:
        Optional[Mapping[str, Any]]: settings, or None if not found
    """
    if not isinstance(config, dict):
        return None

    custom = config.get("custom")
    if isinstance(custom, dict) and SETTINGS_KEY in custom:
        return custom[SETTINGS_KEY]

    return config.get(SETTINGS_KEY)


def _config_file(config_file_path: str) -> ConfigFile:
    conf: ConfigFile = {
        "FilePath": config_file_path,
        "Type": "json",  # default
    }
    if config_file_path.endswith("yaml") or config_file_path.endswith("yml"):
        conf["Type"] = "yaml"

    return conf


def _resolve_file_path(file_path: Optional[str]) -> ConfigFile:
    if file_path:
        if path.exists(file_path):
            return _config_file(file_path)
        else:
            raise FileNotFoundError(file_path)
    else:
        for file_name in DEFAULT_CONFIG_FILES:
            if path.exists(file_name):
                return _config_file(file_name)

        raise ValueError("config file not found. locate `sqs-alarms.yaml` or specify `-c your-config.yaml`")


def default_config() -> dict[str, Any]:
    """Gets default settings

    `stages` is left out so that alarms are deployed on every stage.

    Returns:
        dict[str, Any]: default settings dict
    """
    return {
        "alarms": [],
    }


def _merge_dicts(conf1: Mapping[str, Any], conf2: Mapping[str, Any]) -> dict[str, Any]:
    ret = dict(conf1)
    for k, v2 in conf2.items():
        v1 = ret.get(k)
        if isinstance(v1, dict) and isinstance(v2, dict):
            ret[k] = _merge_dicts(v1, v2)
        else:
            ret[k] = v2  # overwrite

    return ret
