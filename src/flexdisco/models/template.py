"""Template document and probe configuration models."""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, validator


class TemplateDocument(BaseModel):
    """A named configuration template as loaded from disk."""
    file_name: str = Field(..., description="File name including extension")
    raw_text: str = Field(default="")


def _attribute_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


class ProbeConfig(BaseModel):
    """Parsed probe configuration.

    Only the fields discovery touches are modelled; every other key of the
    template is kept as-is.
    """
    name: Optional[str] = None
    custom_attributes: Optional[Dict[str, str]] = None

    @validator("custom_attributes", pre=True)
    def stringify_attributes(cls, v):
        """Scalar attribute values are kept in their YAML text form."""
        if isinstance(v, dict):
            return {str(key): _attribute_text(value) for key, value in v.items()}
        return v

    class Config:
        """Pydantic config."""
        extra = "allow"
