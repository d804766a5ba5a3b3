"""Configuration for the XRootD transfer client."""

from pydantic import BaseModel


class XRootDConfig(BaseModel):
    """Configuration for the xrdcp-based transfer client."""

    binary: str = "xrdcp"
    extra_args: tuple[str, ...] = ()
