from __future__ import annotations

from enum import Enum

from pydantic import Field, model_validator

from fbadmin.core import DataModel


class TagColor(str, Enum):
    BLUE = "BLUE"
    BROWN = "BROWN"
    CYAN = "CYAN"
    DEEP_ORANGE = "DEEP_ORANGE"
    GREEN = "GREEN"
    INDIGO = "INDIGO"
    LIME = "LIME"
    ORANGE = "ORANGE"
    PINK = "PINK"
    PURPLE = "PURPLE"
    TEAL = "TEAL"


class Condition(DataModel):
    """Named condition of a template.

    Attributes:
        name: Condition name, referenced by conditional values.
        expression: Condition expression.
        tag_color: Console color.
    """

    name: str
    expression: str
    tag_color: TagColor | None = None


class ParameterValue(DataModel):
    """Explicit value, or a flag to use the in-app default.

    Exactly one of value and use_in_app_default is set.
    """

    value: str | None = None
    use_in_app_default: bool | None = None

    @model_validator(mode="after")
    def check_one_of(self) -> ParameterValue:
        if (self.value is None) == (self.use_in_app_default is None):
            raise ValueError(
                "Exactly one of value and use_in_app_default is required"
            )
        return self


class ParameterValueType(str, Enum):
    STRING = "STRING"
    BOOLEAN = "BOOLEAN"
    NUMBER = "NUMBER"
    JSON = "JSON"


class Parameter(DataModel):
    """Template parameter.

    Attributes:
        default_value: Value when no condition matches.
        conditional_values: Values by condition name.
        description: Description.
        value_type: Type of the values.
    """

    default_value: ParameterValue | None = None
    conditional_values: dict[str, ParameterValue] = Field(
        default_factory=dict
    )
    description: str | None = None
    value_type: ParameterValueType | None = None


class ParameterGroup(DataModel):
    description: str | None = None
    parameters: dict[str, Parameter] = Field(default_factory=dict)


class User(DataModel):
    email: str | None = None
    name: str | None = None
    image_url: str | None = None


class Version(DataModel):
    """Template version metadata.

    Attributes:
        version_number: Version number, as a string.
        update_time: RFC3339 time of the update.
        update_origin: e.g. CONSOLE, REST_API.
        update_type: e.g. INCREMENTAL_UPDATE, ROLLBACK.
        rollback_source: Version rolled back to, for rollbacks.
    """

    version_number: str | None = None
    update_time: str | None = None
    update_user: User | None = None
    description: str | None = None
    update_origin: str | None = None
    update_type: str | None = None
    rollback_source: str | None = None
    is_legacy: bool | None = None


class RemoteConfigTemplate(DataModel):
    """Remote Config template.

    Attributes:
        conditions: Conditions, in evaluation order.
        parameters: Parameters by key.
        parameter_groups: Parameter groups by name.
        version: Version of the template.
        etag: ETag of the template, from the response header.
            It is sent as If-Match when the template is
            published and never in the body.
    """

    conditions: list[Condition] = Field(default_factory=list)
    parameters: dict[str, Parameter] = Field(default_factory=dict)
    parameter_groups: dict[str, ParameterGroup] = Field(
        default_factory=dict
    )
    version: Version | None = None
    etag: str | None = Field(default=None, exclude=True)


class ListVersionsOptions(DataModel):
    page_size: int | None = None
    page_token: str | None = None
    end_version_number: str | None = None
    start_time: str | None = None
    end_time: str | None = None


class ListVersionsResult(DataModel):
    versions: list[Version] = Field(default_factory=list)
    next_page_token: str | None = None
