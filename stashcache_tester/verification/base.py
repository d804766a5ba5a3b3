"""Abstract base class for manifest verifiers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, kw_only=True)
class Verifier(ABC):
    """Checks downloaded files against a checksum manifest."""

    @abstractmethod
    async def verify(self, directory: Path, manifest_name: str) -> bool:
        """Verify every manifest entry against the files in ``directory``.

        Args:
            directory: Directory holding the downloaded files and manifest
            manifest_name: File name of the manifest inside ``directory``

        Returns:
            True only if every entry matches; False on any mismatch, missing
            file or tool error

        """
