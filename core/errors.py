"""
Exception hierarchy for mcp-skill-tool.

Every fatal condition raised by the core derives from ToolchainError so the
CLI can report it on stderr and exit non-zero. A missing native file or a
missing skill directory is never an error; adapters report those as notes.
"""

from pathlib import Path
from typing import Iterable, List, Optional, Union


class ToolchainError(Exception):
    """Base exception for all mcp-skill-tool operations."""
    pass


class MalformedConfigError(ToolchainError):
    """A config file exists but cannot be parsed in its expected format."""

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to parse {self.path}: {reason}")


class SpecValidationError(ToolchainError):
    """A loaded unified spec fails structural validation."""

    def __init__(self, path: Optional[Union[str, Path]], errors: List[str]):
        self.path = Path(path) if path is not None else None
        self.errors = errors
        where = f" {self.path}" if self.path is not None else ""
        details = "; ".join(errors)
        super().__init__(f"Invalid spec{where}: {details}")


class UnknownIdentifierError(ToolchainError):
    """An unrecognized host id, entry kind or entry name was requested."""

    def __init__(self, kind: str, values: Union[str, Iterable[str]], valid: Iterable[str]):
        if isinstance(values, str):
            values = [values]
        self.kind = kind
        self.values = list(values)
        self.valid = list(valid)
        super().__init__(
            f"Unknown {kind}(s): {', '.join(self.values)}. "
            f"Valid: {', '.join(self.valid) if self.valid else '(none)'}"
        )


class EntryNotFoundError(UnknownIdentifierError):
    """No spec entry carries the requested name."""
    pass


class AmbiguousEntryError(ToolchainError):
    """A name exists at more than one scope and no scope was given."""

    def __init__(self, kind: str, name: str, scopes: Iterable[str]):
        self.kind = kind
        self.name = name
        self.scopes = sorted(scopes)
        super().__init__(
            f"{kind} '{name}' exists in scopes {', '.join(self.scopes)}; "
            f"pass --scope to choose one"
        )


class UnsupportedOperationError(ToolchainError):
    """The selected host cannot perform the requested operation."""
    pass
