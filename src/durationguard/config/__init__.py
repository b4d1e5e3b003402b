"""Feature parameters and their resolution into a decision policy."""

from durationguard.config.models import (
    FeatureParameters,
    InvalidProperty,
    default_parameters,
    describe_parameters,
    validate_parameters,
)
from durationguard.config.settings import (
    DecisionPolicy,
    InertPolicy,
    ThresholdPolicy,
    resolve_policy,
)
from durationguard.config.yaml_config import load_feature_parameters

__all__ = [
    "FeatureParameters",
    "InvalidProperty",
    "default_parameters",
    "describe_parameters",
    "validate_parameters",
    "DecisionPolicy",
    "InertPolicy",
    "ThresholdPolicy",
    "resolve_policy",
    "load_feature_parameters",
]
