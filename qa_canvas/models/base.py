from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for wire models: snake_case attributes, camelCase JSON keys.

    Instances are frozen; derive updated copies with ``model_copy(update=...)``.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_wire(self) -> dict:
        """Dump using the camelCase keys clients send and expect back"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
