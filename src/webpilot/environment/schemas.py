"""Validated input models for each browser tool."""

from typing import List, Literal, Optional

from pydantic import AnyUrl, BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

_URL_ADAPTER = TypeAdapter(AnyUrl)


class ToolArgs(BaseModel):
    """Base for tool argument models: camelCase aliases, unknown keys dropped."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class NoArgs(ToolArgs):
    pass


class OpenUrlArgs(ToolArgs):
    url: str = Field(description="The URL to navigate to")

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        # Validate as an absolute URL but hand the caller's string through unchanged
        value = value.strip()
        _URL_ADAPTER.validate_python(value)
        return value


class TakeScreenshotArgs(ToolArgs):
    context: str = Field(
        description="Description of what action was performed or what to expect in the screenshot"
    )


class FindAndClickArgs(ToolArgs):
    identifier: str = Field(
        min_length=1,
        description="Text, placeholder, label, or CSS selector to identify the element",
    )
    element_type: Optional[str] = Field(
        default=None,
        alias="elementType",
        description="Type of element (button, link, input, etc.)",
    )


class FieldDescriptor(ToolArgs):
    field_identifier: str = Field(
        min_length=1,
        alias="fieldIdentifier",
        description="Label text, placeholder, or field name",
    )
    value: str = Field(description="Value to fill in the field")
    field_type: Optional[str] = Field(
        default=None,
        alias="fieldType",
        description="Expected field type (text, email, password, etc.)",
    )


class FillFormFieldsArgs(ToolArgs):
    fields: List[FieldDescriptor] = Field(
        min_length=1,
        description="Array of field objects to fill",
    )


class ScrollPageArgs(ToolArgs):
    direction: Literal["up", "down", "to-element"] = Field(description="Scroll direction or target")
    pixels: float = Field(
        default=500,
        description="Number of pixels to scroll (for up/down)",
    )
    element_identifier: str = Field(
        default="",
        alias="elementIdentifier",
        description="Element identifier for scroll-to-element",
    )

    @model_validator(mode="after")
    def require_target(self):
        if self.direction == "to-element" and not self.element_identifier.strip():
            raise ValueError("elementIdentifier is required when direction is 'to-element'")
        return self
