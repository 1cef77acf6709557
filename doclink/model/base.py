"""Protocol for program model loaders."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from doclink.model.models import ProgramModel


class ModelLoader(Protocol):
    """Protocol for program model loaders."""

    def load(self, path: Path) -> ProgramModel:
        """Read a file and build the elements it declares."""
        ...

    def supports(self, path: Path) -> bool:
        """Check if this loader supports the given file."""
        ...
