from ._models import (
    Condition,
    ListVersionsOptions,
    ListVersionsResult,
    Parameter,
    ParameterGroup,
    ParameterValue,
    ParameterValueType,
    RemoteConfigTemplate,
    TagColor,
    User,
    Version,
)
from .component import RemoteConfig

__all__ = [
    "Condition",
    "ListVersionsOptions",
    "ListVersionsResult",
    "Parameter",
    "ParameterGroup",
    "ParameterValue",
    "ParameterValueType",
    "RemoteConfig",
    "RemoteConfigTemplate",
    "TagColor",
    "User",
    "Version",
]
