"""Configuration for the HTTP transfer client."""

from typing import Literal

from pydantic import BaseModel, Field


class HttpTransferConfig(BaseModel):
    """Configuration for fetching test files over HTTP(S)."""

    scheme: Literal["http", "https"] = "http"
    # StashCache endpoints serve HTTP on 8000 next to xrootd on 1094
    port: int | None = Field(default=8000, ge=1, le=65535)
