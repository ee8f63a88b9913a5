"""Base model configuration for all wire data structures."""

from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from yarl import URL


class Model(BaseModel):
    """Base model with camelCase wire names and standard configuration."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict[str, object]:
        """Serialize to a JSON-ready dict using wire names, omitting unset values."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def validate_base_url(value: str) -> str:
    """Accept only plain http(s) URLs with a host and nothing beyond a path."""
    url = URL(value)
    if (
        url.scheme not in {"http", "https"}
        or not url.host
        or url.user is not None
        or url.query_string
        or url.fragment
    ):
        raise ValueError(f"is not valid HTTP/HTTPS URL, was: {value}")
    return value


BaseUrl = Annotated[str, AfterValidator(validate_base_url)]
