from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Python attributes are snake_case; stored documents and API payloads
    use the camelCase field names the history labels are keyed on.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
    )

    def to_document(self, *, partial: bool = False) -> Dict[str, Any]:
        """Dump to a storage document. Partial dumps keep only fields the client sent."""
        return self.model_dump(by_alias=True, exclude_unset=partial, exclude={"id"})
