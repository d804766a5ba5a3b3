"""Base model configuration for configuration and wire models."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Immutable model; surrounding whitespace in string fields is dropped."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)
