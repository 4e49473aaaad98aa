import logging
from dataclasses import dataclass
from typing import Any, MutableMapping, Optional

import boto3

from . import config_loader
from .alarm import compile_alarms
from .models import PluginSettings
from .template import OutputFormat, dump_template, load_template, merge_resources

logger = logging.getLogger(__name__)


@dataclass
class CommandOpts:
    """Command Options"""

    config_file: Optional[str]
    template_file: Optional[str]
    stage: Optional[str]
    region: Optional[str]
    output_format: OutputFormat


def main(opts: CommandOpts) -> None:
    """The main function

    Args:
        opts (CommandOpts): command options
    """
    settings = config_loader.load(opts.config_file)
    template = load_template(opts.template_file)

    if settings is None:
        logger.info("no `%s` settings found. no alarms generated", config_loader.SETTINGS_KEY)
    else:
        apply_alarms(settings, opts.stage, opts.region, template["Resources"])

    _print(dump_template(template, opts.output_format))


def apply_alarms(
    settings: PluginSettings, stage: Optional[str], region: Optional[str], resources: MutableMapping[str, Any]
) -> bool:
    """Generates alarms and merges them into the template resources

    Args:
        settings (PluginSettings): `sqs-alarms` settings
        stage (Optional[str]): current deployment stage
        region (Optional[str]): AWS region, or None to use the default of the environment
        resources (MutableMapping[str, Any]): `Resources` of the template, updated in place

    Returns:
        bool: True if alarms are merged, False if skipped on this stage
    """
    if not should_deploy(settings, stage):
        return False

    fragments = compile_alarms(settings.get("alarms", []), resolve_region(region))
    logger.debug("generated %d alarm(s)", len(fragments))
    merge_resources(resources, fragments)
    return True


def should_deploy(settings: PluginSettings, stage: Optional[str]) -> bool:
    """Checks whether alarms are deployed on the stage

    Args:
        settings (PluginSettings): `sqs-alarms` settings
        stage (Optional[str]): current deployment stage

    Returns:
        bool: False if `stages` is configured and does not contain the stage
    """
    stages = settings.get("stages")
    if isinstance(stages, list) and stage not in stages:
        logger.info("Info: Not deploying alarms on stage %s", stage)
        return False

    return True


def resolve_region(region: Optional[str]) -> str:
    """Resolves the AWS region

    Args:
        region (Optional[str]): region given explicitly

    Returns:
        str: the given region, or the default region of the boto3 session
    """
    if region:
        return region

    session_region = boto3.session.Session().region_name
    if not session_region:
        raise ValueError("AWS region not found. set AWS_DEFAULT_REGION or specify `-r your-region`")

    return session_region


def _print(text: str) -> None:
    print(text)  # noqa: T201
