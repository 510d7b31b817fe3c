"""Pydantic schemas for the Meshery model registry API."""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class Category(BaseModel):
    """Grouping label attached to a model."""
    model_config = ConfigDict(extra="allow", frozen=True)

    name: str = ""
    metadata: dict[str, Any] | None = None


class Model(BaseModel):
    """A catalog entry describing a component definition.

    Fields the server sends beyond these are kept as extras so a detailed
    view shows the full record.
    """
    model_config = ConfigDict(extra="allow", frozen=True)

    id: str | None = None
    name: str = ""
    display_name: str = Field(default="", validation_alias=AliasChoices("display_name", "displayName"))
    version: str = ""
    category: Category = Field(default_factory=Category)
    status: str | None = None
    metadata: dict[str, Any] | None = None

    @field_validator("category", mode="before")
    @classmethod
    def _null_category(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def label(self) -> str:
        """Text used to tell models apart at a selection prompt."""
        return f"{self.display_name}, version: {self.version}"

    def to_output_dict(self) -> dict[str, Any]:
        """Serializable dict of everything received, without unset optionals."""
        return self.model_dump(mode="json", exclude_none=True)


class ModelListResponse(BaseModel):
    """Paged list of models as returned by ``/api/meshmodels/models``."""
    model_config = ConfigDict(extra="ignore")

    page: int = 0
    page_size: int = 0
    count: int = 0
    models: list[Model] = Field(default_factory=list)

    @field_validator("count", "page", "page_size", mode="before")
    @classmethod
    def _null_int(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("models", mode="before")
    @classmethod
    def _null_models(cls, value: Any) -> Any:
        # The server encodes an empty result as null
        return [] if value is None else value

    def displayable(self) -> list[Model]:
        """Models with a display name; the rest are internal entries."""
        return [m for m in self.models if m.display_name]
