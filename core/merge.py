"""
Merge engine: pure functions over ToolchainSpec.

Nothing here touches the filesystem. Every function returns a new spec and
leaves its arguments unchanged.
"""

from typing import Dict, Iterable, List, Optional, TypeVar, Union

from core.errors import AmbiguousEntryError, EntryNotFoundError, UnknownIdentifierError
from core.models import (
    ENTRY_KINDS,
    ImportResult,
    McpServerSpec,
    RemoteTransport,
    SkillSpec,
    SPEC_VERSION,
    ToolchainSpec,
)
from core.redact import SecretClassifier, sanitize_record

Entry = TypeVar('Entry', McpServerSpec, SkillSpec)


def _sorted(entries: Iterable[Entry]) -> List[Entry]:
    return sorted(entries, key=lambda e: (e.name, e.scope))


def normalize_spec(spec: ToolchainSpec) -> ToolchainSpec:
    """Sort both collections by name (scope breaks ties)."""
    return ToolchainSpec(
        version=SPEC_VERSION,
        mcp_servers=_sorted(spec.mcp_servers),
        skills=_sorted(spec.skills),
    )


def _union(base: Iterable[Entry], incoming: Iterable[Entry]) -> List[Entry]:
    by_key: Dict[str, Entry] = {}
    for entry in base:
        by_key[entry.key] = entry
    for entry in incoming:
        if entry.key not in by_key:
            by_key[entry.key] = entry
    return _sorted(by_key.values())


def merge_spec(base: ToolchainSpec,
               incoming: Optional[Union[ToolchainSpec, ImportResult]] = None) -> ToolchainSpec:
    """
    Asymmetric union of two specs keyed by "scope:name".

    Base always wins: an entry already present in `base` is never replaced
    by freshly discovered host state, so repeated imports are idempotent and
    manual edits to the unified spec survive. Keys only present in `incoming` are
    added. `incoming` may be a full spec or an adapter's ImportResult.
    """
    incoming_servers = incoming.mcp_servers if incoming is not None else []
    incoming_skills = incoming.skills if incoming is not None else []
    return ToolchainSpec(
        version=SPEC_VERSION,
        mcp_servers=_union(base.mcp_servers, incoming_servers),
        skills=_union(base.skills, incoming_skills),
    )


def set_enabled(spec: ToolchainSpec, kind: str, name: str, enabled: bool,
                scope: Optional[str] = None) -> ToolchainSpec:
    """
    Toggle the `enabled` flag of the entry called `name`.

    Without `scope`, a name that exists at both scopes is rejected with
    AmbiguousEntryError rather than toggling both entries.
    """
    if kind not in ENTRY_KINDS:
        raise UnknownIdentifierError('entry kind', kind, ENTRY_KINDS)
    entries = spec.mcp_servers if kind == 'mcp' else spec.skills

    matches = [e for e in entries if e.name == name and (scope is None or e.scope == scope)]
    if not matches:
        raise EntryNotFoundError(f"{kind} entry", name, sorted({e.name for e in entries}))
    if scope is None and len({e.scope for e in matches}) > 1:
        raise AmbiguousEntryError(kind, name, {e.scope for e in matches})

    keys = {e.key for e in matches}
    updated = [e.model_copy(update={'enabled': enabled}) if e.key in keys else e for e in entries]
    if kind == 'mcp':
        return spec.model_copy(update={'mcp_servers': updated})
    return spec.model_copy(update={'skills': updated})


def _sanitize_server(server: McpServerSpec,
                     classifier: Optional[SecretClassifier]) -> McpServerSpec:
    transport = server.transport
    if isinstance(transport, RemoteTransport):
        transport = transport.model_copy(
            update={'headers': sanitize_record(transport.headers, classifier)}
        )
    else:
        transport = transport.model_copy(
            update={'env': sanitize_record(transport.env, classifier)}
        )
    return server.model_copy(update={'transport': transport})


def sanitize_spec(spec: ToolchainSpec,
                  classifier: Optional[SecretClassifier] = None) -> ToolchainSpec:
    """Run the storage sanitizer over every env and headers map."""
    return spec.model_copy(
        update={'mcp_servers': [_sanitize_server(s, classifier) for s in spec.mcp_servers]}
    )
