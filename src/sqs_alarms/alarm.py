import re
from collections.abc import Mapping
from typing import Any, Iterable, Optional, Union

from .models import (
    AlarmConfig,
    AlarmProperties,
    AlarmResource,
    MissingDataSource,
    PerIndexMissingData,
    Threshold,
    ThresholdEntry,
    UniformMissingData,
)

RESOURCE_TYPE = "AWS::CloudWatch::Alarm"
METRIC_NAME = "ApproximateNumberOfMessagesVisible"
STATISTIC = "Sum"
COMPARISON_OPERATOR = "GreaterThanOrEqualToThreshold"
DEFAULT_NAMESPACE = "AWS/SQS"
DEFAULT_PERIOD = 60
DEFAULT_EVALUATION_PERIODS = 1

ALARM_DESCRIPTION_FORMAT = "Alarm if queue contains more than {} messages"

# CloudFormation logical ids must be alphanumeric
NONALPHANUM = re.compile(r"[^0-9a-zA-Z]")


def format_value(value: Union[int, float]) -> str:
    """Renders a threshold value as a decimal string

    `3.0` is rendered as `3`.

    Args:
        value (Union[int, float]): threshold value

    Returns:
        str: rendered value
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_threshold(entry: ThresholdEntry) -> Threshold:
    """Normalizes a threshold entry

    A bare number is the `value` of a threshold with every other field defaulted.

    Args:
        entry (ThresholdEntry): number or threshold config

    Returns:
        Threshold: normalized threshold
    """
    if isinstance(entry, Mapping):
        return Threshold(
            value=entry["value"],
            namespace=entry.get("namespace") or DEFAULT_NAMESPACE,
            period=entry.get("period") or DEFAULT_PERIOD,
            evaluation_periods=entry.get("evaluationPeriods") or DEFAULT_EVALUATION_PERIODS,
        )

    return Threshold(
        value=entry,
        namespace=DEFAULT_NAMESPACE,
        period=DEFAULT_PERIOD,
        evaluation_periods=DEFAULT_EVALUATION_PERIODS,
    )


def missing_data_source(treat_missing_data: Any) -> Optional[MissingDataSource]:
    """Gets the source of missing data policies

    Args:
        treat_missing_data (Any): `treatMissingData` of the alarm config

    Returns:
        Optional[MissingDataSource]: policy source, or None if not configured
    """
    if not treat_missing_data:
        return None
    if isinstance(treat_missing_data, (list, tuple)):
        return PerIndexMissingData(tuple(treat_missing_data))
    return UniformMissingData(treat_missing_data)


class Alarm:
    """Alarms of a queue"""

    def __init__(self, config: AlarmConfig, region: str) -> None:
        """Constructor

        Args:
            config (AlarmConfig): alarm config
            region (str): AWS region
        """
        self.queue = config["queue"]
        self.topic = config["topic"]
        self.region = region
        self.thresholds = [normalize_threshold(t) for t in config["thresholds"]]
        self.name = config.get("name")
        self.missing_data = missing_data_source(config.get("treatMissingData"))
        self.ok_alerts = config.get("okAlerts", True)

    def logical_id(self, value: Union[int, float]) -> str:
        """Gets the CloudFormation logical id of the alarm

        Args:
            value (Union[int, float]): threshold value

        Returns:
            str: logical id
        """
        return f"{NONALPHANUM.sub('', self.queue)}MessageAlarm{format_value(value)}"

    def alarm_name(self, value: Union[int, float]) -> Optional[str]:
        """Gets the alarm name

        Args:
            value (Union[int, float]): threshold value

        Returns:
            Optional[str]: alarm name, or None if no `name` is configured
        """
        if not self.name:
            return None
        return f"{self.name}-{self.queue}-{format_value(value)}"

    def treat_missing_data(self, index: int) -> Optional[str]:
        """Resolves the missing data treatment of a threshold

        Args:
            index (int): position of the threshold

        Returns:
            Optional[str]: valid treatment, or None
        """
        if self.missing_data is None:
            return None
        return self.missing_data.resolve(index)

    def notification_actions(self) -> list[dict[str, Any]]:
        """Gets the SNS topic ARN, joined with the account id at deploy time

        Returns:
            list[dict[str, Any]]: alarm actions
        """
        return [
            {
                "Fn::Join": [
                    "",
                    [f"arn:aws:sns:{self.region}:", {"Ref": "AWS::AccountId"}, f":{self.topic}"],
                ],
            },
        ]

    def properties(self, index: int, threshold: Threshold) -> AlarmProperties:
        """Builds alarm properties

        Args:
            index (int): position of the threshold
            threshold (Threshold): normalized threshold

        Returns:
            AlarmProperties: alarm properties
        """
        props: AlarmProperties = {
            "AlarmDescription": ALARM_DESCRIPTION_FORMAT.format(format_value(threshold.value)),
            "Namespace": threshold.namespace,
            "MetricName": METRIC_NAME,
            "Dimensions": [{"Name": "QueueName", "Value": self.queue}],
            "Statistic": STATISTIC,
            "Period": threshold.period,
            "EvaluationPeriods": threshold.evaluation_periods,
            "Threshold": threshold.value,
            "ComparisonOperator": COMPARISON_OPERATOR,
            "AlarmActions": self.notification_actions(),
        }

        optionals = {
            "OKActions": self.notification_actions() if self.ok_alerts else None,
            "AlarmName": self.alarm_name(threshold.value),
            "TreatMissingData": self.treat_missing_data(index),
        }
        props.update({k: v for k, v in optionals.items() if v is not None})  # type: ignore

        return props

    def resources(self) -> list[AlarmResource]:
        """Gets resource fragments, one per threshold

        Returns:
            list[AlarmResource]: resource fragments in threshold order
        """
        return [
            {
                self.logical_id(threshold.value): {
                    "Type": RESOURCE_TYPE,
                    "Properties": self.properties(i, threshold),
                },
            }
            for i, threshold in enumerate(self.thresholds)
        ]


def compile_alarms(alarm_configs: Iterable[AlarmConfig], region: str) -> list[AlarmResource]:
    """Compiles alarm configs into CloudFormation resource fragments

    Args:
        alarm_configs (Iterable[AlarmConfig]): alarm configs
        region (str): AWS region

    Returns:
        list[AlarmResource]: fragments in config order, then threshold order
    """
    return [resource for config in alarm_configs for resource in Alarm(config, region).resources()]
