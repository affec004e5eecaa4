"""
Loader base class and registry for division record sources.

A loader turns one source file into DivisionRecords in file order. Bad
lines are not fatal: they are skipped and noted on the loader, so callers
can report them after the load. Only a file that cannot be read at all
raises ``LoaderError``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, ClassVar

from quhua.core.region import DivisionRecord
from quhua.errors import QuhuaError

logger = logging.getLogger(__name__)


class LoaderError(QuhuaError):
    """Raised when a source file cannot be loaded at all."""

    def __init__(self, message: str, source_path: Path | None = None, details: str | None = None):
        self.source_path = source_path
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": str(self),
            "source_path": str(self.source_path) if self.source_path else None,
            "details": self.details,
        }


class BaseLoader(ABC):
    """
    Abstract base class for division record loaders.

    Messages from the most recent load are kept in three lists:
    - errors: why the file could not be loaded (set right before raising)
    - warnings: lines skipped or input adjusted
    - info: notes such as a detected header line
    """

    SUPPORTED_EXTENSIONS: ClassVar[list[str]] = []
    LOADER_NAME: ClassVar[str] = "base"

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.info: list[str] = []

    @classmethod
    def can_load(cls, path: Path) -> bool:
        return path.suffix.lower() in cls.SUPPORTED_EXTENSIONS

    @abstractmethod
    def load(self, path: Path) -> list[DivisionRecord]:
        """
        Read division records from a file.

        Raises:
            LoaderError: If the file cannot be read at all
        """

    def load_records(self, path: Path) -> list[DivisionRecord]:
        """
        Check the path, then load it.

        Raises:
            LoaderError: If the file is missing, unsupported or unreadable
        """
        self.reset_messages()
        if not path.exists():
            raise self.fail(f"File not found: {path}", path)
        if not self.can_load(path):
            raise self.fail(
                f"Unsupported file type: {path.suffix}",
                path,
                details=f"Supported types: {', '.join(self.SUPPORTED_EXTENSIONS)}",
            )
        return self.load(path)

    def fail(self, message: str, path: Path, details: str | None = None) -> LoaderError:
        """Record an error and build the exception to raise for it."""
        self.errors.append(message)
        logger.error("%s loader failed on %s: %s", self.LOADER_NAME, path.name, message)
        return LoaderError(message, source_path=path, details=details)

    def reset_messages(self) -> None:
        self.errors = []
        self.warnings = []
        self.info = []

    def report(self) -> dict[str, Any]:
        """Messages of the last load, for display or an API response."""
        return {
            "loader": self.LOADER_NAME,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "info": list(self.info),
        }


class LoaderRegistry:
    """
    Registry of available record loaders, keyed by file extension.

    @LoaderRegistry.register
    class MyLoader(BaseLoader):
        ...
    """

    _loaders: ClassVar[list[type[BaseLoader]]] = []

    @classmethod
    def register(cls, loader_class: type[BaseLoader]) -> type[BaseLoader]:
        if loader_class not in cls._loaders:
            cls._loaders.append(loader_class)
        return loader_class

    @classmethod
    def get_loader(cls, path: Path) -> BaseLoader | None:
        """A new loader instance for the file, None when no loader fits."""
        for loader_class in cls._loaders:
            if loader_class.can_load(path):
                return loader_class()
        return None

    @classmethod
    def supported_extensions(cls) -> list[str]:
        return sorted({ext for loader in cls._loaders for ext in loader.SUPPORTED_EXTENSIONS})

    @classmethod
    def open(cls, path: Path) -> BaseLoader:
        """
        Pick the loader for a path.

        Raises:
            LoaderError: If no registered loader handles the extension
        """
        loader = cls.get_loader(path)
        if loader is None:
            raise LoaderError(
                f"No loader available for file type: {path.suffix}",
                source_path=path,
                details=f"Supported types: {', '.join(cls.supported_extensions())}",
            )
        return loader

    @classmethod
    def load_records(cls, path: Path) -> list[DivisionRecord]:
        """
        Load records using the appropriate loader.

        Raises:
            LoaderError: If no loader is available or loading fails
        """
        return cls.open(path).load_records(path)
