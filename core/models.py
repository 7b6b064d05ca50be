"""
Canonical data models for the unified spec.

These models are the host-agnostic representation every adapter converts
to and from:
- McpServerSpec: an MCP server with a tagged transport (stdio | remote)
- SkillSpec: a directory-backed skill bundle (contains SKILL.md)
- ToolchainSpec: the versioned aggregate persisted as the unified spec
- ImportResult: what one host adapter discovered on disk

Identity of an entry is the pair (scope, name). Two entries with the same
name at different scopes are distinct.
"""

from dataclasses import dataclass, field
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Scope = Literal['repo', 'user']
SCOPES: Tuple[str, ...] = ('repo', 'user')

EntryKind = Literal['mcp', 'skill']
ENTRY_KINDS: Tuple[str, ...] = ('mcp', 'skill')

SKILL_MARKER = 'SKILL.md'
SPEC_VERSION = 1


class StdioTransport(BaseModel):
    """Local process launched by the host and spoken to over stdio."""

    model_config = ConfigDict(extra='forbid')

    kind: Literal['stdio'] = 'stdio'
    command: str
    args: Optional[List[str]] = None
    env: Optional[Dict[str, str]] = None
    cwd: Optional[str] = None


class RemoteTransport(BaseModel):
    """Network endpoint (SSE or streamable HTTP, the host decides)."""

    model_config = ConfigDict(extra='forbid')

    kind: Literal['remote'] = 'remote'
    url: str
    headers: Optional[Dict[str, str]] = None

    @field_validator('url')
    @classmethod
    def _check_url(cls, value: str) -> str:
        parts = urlsplit(value)
        if not parts.scheme or not parts.netloc:
            raise ValueError(f"not a well-formed URL: {value!r}")
        return value


Transport = Annotated[Union[StdioTransport, RemoteTransport], Field(discriminator='kind')]


class McpServerSpec(BaseModel):
    """One MCP server entry of the unified spec."""

    model_config = ConfigDict(extra='forbid')

    name: str = Field(min_length=1)
    enabled: bool = True
    scope: Scope = 'repo'
    transport: Transport

    @property
    def key(self) -> str:
        return entry_key(self.scope, self.name)


class SkillSpec(BaseModel):
    """One skill entry; `path` points at the directory holding SKILL.md."""

    model_config = ConfigDict(extra='forbid')

    name: str = Field(min_length=1)
    enabled: bool = True
    scope: Scope = 'repo'
    path: str = Field(min_length=1)

    @property
    def key(self) -> str:
        return entry_key(self.scope, self.name)


class ToolchainSpec(BaseModel):
    """
    The unified spec document.

    Persisted as YAML with top-level keys `version`, `mcpServers` and
    `skills`. Within each collection no two entries share (scope, name).
    """

    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    version: Literal[1]
    mcp_servers: List[McpServerSpec] = Field(default_factory=list, alias='mcpServers')
    skills: List[SkillSpec] = Field(default_factory=list)

    @model_validator(mode='after')
    def _check_unique_keys(self) -> 'ToolchainSpec':
        for label, entries in (('mcpServers', self.mcp_servers), ('skills', self.skills)):
            seen = set()
            for entry in entries:
                if entry.key in seen:
                    raise ValueError(f"duplicate {label} entry {entry.key}")
                seen.add(entry.key)
        return self

    def to_document(self) -> Dict[str, Any]:
        """Plain structure for serialization (aliases, no null fields)."""
        return self.model_dump(by_alias=True, exclude_none=True)


@dataclass
class ImportResult:
    """Entries a host adapter discovered in its native files."""

    mcp_servers: List[McpServerSpec] = field(default_factory=list)
    skills: List[SkillSpec] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)


def entry_key(scope: str, name: str) -> str:
    return f"{scope}:{name}"


def empty_spec() -> ToolchainSpec:
    return ToolchainSpec(version=SPEC_VERSION)
