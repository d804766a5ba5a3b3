"""Backend manifest definition for the plugin system."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass

from pydantic import BaseModel


@dataclass(frozen=True, kw_only=True)
class BackendManifest[ConfigT: BaseModel, BackendT]:
    """Manifest describing a transfer client or verifier plugin.

    Holds the plugin's configuration class and a factory that opens the
    backend for the duration of a run.
    """

    config_cls: type[ConfigT]
    factory: Callable[[ConfigT], AbstractAsyncContextManager[BackendT]]
