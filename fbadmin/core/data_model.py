__all__ = ["DataModel"]

from typing import Self

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DataModel(BaseModel):
    """Data model.

    Attribute names are snake case in Python and camel case
    on the wire. Both spellings are accepted when parsing.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

    def to_json(self, indent: int | None = None) -> str:
        return self.model_dump_json(
            by_alias=True, exclude_none=True, indent=indent
        )

    @classmethod
    def from_dict(cls, obj: dict | None) -> Self:
        return cls.model_validate(obj or {})

    @classmethod
    def from_json(cls, json: str) -> Self:
        return cls.model_validate_json(json)
