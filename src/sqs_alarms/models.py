from dataclasses import dataclass
from typing import Any, Literal, Mapping, Optional, Sequence, TypedDict, Union

MissingDataPolicy = Literal["missing", "ignore", "breaching", "notBreaching"]

VALID_MISSING_DATA_POLICIES: tuple[str, ...] = ("missing", "ignore", "breaching", "notBreaching")


class ThresholdConfigRequired(TypedDict):
    """Threshold Config with required keys

    Args:
        TypedDict (_type_): typed dict
    """

    value: Union[int, float]


class ThresholdConfig(ThresholdConfigRequired, total=False):
    """Threshold Config

    Args:
        ThresholdConfigRequired (_type_): ThresholdConfigRequired
    """

    namespace: str
    period: int
    evaluationPeriods: int


ThresholdEntry = Union[int, float, ThresholdConfig]


class AlarmConfigRequired(TypedDict):
    """Alarm Config with required keys

    Args:
        TypedDict (_type_): typed dict
    """

    queue: str
    topic: str
    thresholds: Sequence[ThresholdEntry]


class AlarmConfig(AlarmConfigRequired, total=False):
    """Alarm Config, an element of `alarms` in the settings

    Args:
        AlarmConfigRequired (_type_): AlarmConfigRequired
    """

    name: str
    treatMissingData: Union[str, Sequence[str]]
    okAlerts: bool


class PluginSettings(TypedDict, total=False):
    """Settings under the `sqs-alarms` key

    Args:
        TypedDict (_type_): typed dict
    """

    alarms: Sequence[AlarmConfig]
    stages: Sequence[str]


class AlarmProperties(TypedDict, total=False):
    """Properties of an `AWS::CloudWatch::Alarm` resource

    Args:
        TypedDict (_type_): typed dict
    """

    AlarmName: str
    AlarmDescription: str
    Namespace: str
    MetricName: str
    Dimensions: Sequence[Mapping[str, str]]
    Statistic: str
    Period: int
    EvaluationPeriods: int
    Threshold: Union[int, float]
    ComparisonOperator: str
    AlarmActions: Sequence[Mapping[str, Any]]
    OKActions: Sequence[Mapping[str, Any]]
    TreatMissingData: str


class AlarmResourceDefinition(TypedDict):
    """CloudFormation resource definition

    Args:
        TypedDict (_type_): typed dict
    """

    Type: str
    Properties: AlarmProperties


# a single-key mapping: logical id -> resource definition
AlarmResource = dict[str, AlarmResourceDefinition]


@dataclass(frozen=True)
class Threshold:
    """Normalized threshold"""

    value: Union[int, float]
    namespace: str
    period: int
    evaluation_periods: int


@dataclass(frozen=True)
class UniformMissingData:
    """A missing data policy applied to every threshold"""

    policy: Any

    def resolve(self, index: int) -> Optional[str]:
        """Resolves the policy for a threshold

        Args:
            index (int): position of the threshold

        Returns:
            Optional[str]: valid policy, or None
        """
        return validate_missing_data_policy(self.policy)


@dataclass(frozen=True)
class PerIndexMissingData:
    """Missing data policies aligned by index to the thresholds"""

    policies: Sequence[Any]

    def resolve(self, index: int) -> Optional[str]:
        """Resolves the policy for a threshold

        Args:
            index (int): position of the threshold

        Returns:
            Optional[str]: valid policy, or None if missing or invalid
        """
        if index >= len(self.policies):
            return None
        return validate_missing_data_policy(self.policies[index])


MissingDataSource = Union[UniformMissingData, PerIndexMissingData]


def validate_missing_data_policy(policy: Any) -> Optional[str]:
    """Validates a missing data policy

    Args:
        policy (Any): policy given by the settings

    Returns:
        Optional[str]: the policy if it is one of the known values, else None
    """
    if isinstance(policy, str) and policy in VALID_MISSING_DATA_POLICIES:
        return policy
    return None
