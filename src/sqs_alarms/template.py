from typing import Any, Iterable, Literal, MutableMapping, Optional

import cfn_flip

from .models import AlarmResource

OutputFormat = Literal["json", "yaml"]

TEMPLATE_FORMAT_VERSION = "2010-09-09"


def new_template() -> dict[str, Any]:
    """Creates an empty CloudFormation template

    Returns:
        dict[str, Any]: template dict
    """
    return {
        "AWSTemplateFormatVersion": TEMPLATE_FORMAT_VERSION,
        "Resources": {},
    }


def load_template(file_path: Optional[str]) -> dict[str, Any]:
    """Loads a CloudFormation template

    Short-form intrinsic functions in YAML (`!Ref`, `!Sub`, ...) are loaded
    in their long form (`{"Ref": ...}`, `{"Fn::Sub": ...}`).

    Args:
        file_path (Optional[str]): template file path, or None for an empty template

    Returns:
        dict[str, Any]: template dict, which always has `Resources`
    """
    if not file_path:
        return new_template()

    with open(file_path, "r") as f:
        body = f.read()

    if file_path.endswith("yaml") or file_path.endswith("yml"):
        template = cfn_flip.load_yaml(body)
    else:
        template = cfn_flip.load_json(body)

    if not isinstance(template, dict):
        raise ValueError(f"not a CloudFormation template: {file_path}")
    template.setdefault("Resources", {})
    return template


def dump_template(template: dict[str, Any], output_format: OutputFormat = "json") -> str:
    """Serializes a template

    YAML output uses short-form intrinsic functions.

    Args:
        template (dict[str, Any]): template dict
        output_format (OutputFormat): `json` or `yaml`

    Returns:
        str: serialized template
    """
    if output_format == "yaml":
        return cfn_flip.dump_yaml(template)
    return cfn_flip.dump_json(template)


def merge_resources(
    resources: MutableMapping[str, Any], fragments: Iterable[AlarmResource]
) -> MutableMapping[str, Any]:
    """Deep-merges resource fragments into `Resources`, in order

    A later fragment with the same logical id overwrites the values of an earlier one.

    Args:
        resources (MutableMapping[str, Any]): `Resources` of a template, updated in place
        fragments (Iterable[AlarmResource]): resource fragments

    Returns:
        MutableMapping[str, Any]: the updated resources
    """
    for fragment in fragments:
        _deep_merge(resources, fragment)

    return resources


def _deep_merge(dest: MutableMapping[str, Any], src: MutableMapping[str, Any]) -> None:
    for k, v in src.items():
        current = dest.get(k)
        if isinstance(current, dict) and isinstance(v, dict):
            _deep_merge(current, v)
        elif isinstance(v, dict):
            dest[k] = {}
            _deep_merge(dest[k], v)
        else:
            dest[k] = v
