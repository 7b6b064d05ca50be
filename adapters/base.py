"""
Host adapter contract and the single adapter algorithm.

Every supported AI coding tool ("host") is described by a HostDescriptor:
- which file(s) it keeps MCP servers in, and in which format
- which scope that file represents (repo files live under the repository
  root, user files under the home directory)
- the literal field names of its stdio and remote server shapes
- where its skill directories are, if it has any

HostAdapter implements import and apply once, driven by the descriptor.
Per-host modules only declare data.

Native entries are classified by one ordered rule for every host: if any of
the descriptor's URL keys is present (checked in order) the entry is remote;
otherwise if the command key is present it is stdio; otherwise the entry is
skipped with a note.
"""

import logging
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import tomlkit
from pydantic import ValidationError

from core.errors import MalformedConfigError, UnsupportedOperationError
from core.fileio import (
    backup_file,
    copy_tree,
    dump_json,
    dump_toml,
    move_tree,
    read_json,
    read_jsonc,
    read_toml,
    write_text_atomic,
)
from core.models import (
    ImportResult,
    McpServerSpec,
    RemoteTransport,
    StdioTransport,
    ToolchainSpec,
)
from core.paths import HostEnvironment
from core.redact import sanitize_record
from core.skills import DISABLED_DIR, SkillLocation, is_skill_dir, list_skill_dirs

logger = logging.getLogger(__name__)

_READERS = {
    'json': read_json,
    'jsonc': read_jsonc,
    'toml': read_toml,
}

_WRITERS = {
    'json': dump_json,
    'jsonc': dump_json,
    'toml': dump_toml,
}


@dataclass(frozen=True)
class FieldMap:
    """
    Literal field names of a host's native server entries.

    `args=None` means the host folds command and arguments into one list
    under the command key. Tags are (key, value) pairs written into every
    entry of that shape. `enabled` names a native enable flag, if the host
    has one.
    """

    container: Tuple[str, ...] = ('mcpServers',)
    legacy_containers: Tuple[Tuple[str, ...], ...] = ()
    command: str = 'command'
    args: Optional[str] = 'args'
    env: str = 'env'
    cwd: Optional[str] = None
    url_keys: Tuple[str, ...] = ('url',)
    headers: Optional[str] = 'headers'
    stdio_tag: Optional[Tuple[str, str]] = None
    remote_tag: Optional[Tuple[str, str]] = None
    enabled: Optional[str] = None


@dataclass(frozen=True)
class HostDescriptor:
    """Declarative description of one host."""

    id: str
    label: str
    scope: str
    config_files: Tuple[str, ...]
    format: str = 'json'
    fields: FieldMap = field(default_factory=FieldMap)
    skill_dirs: Dict[str, str] = field(default_factory=dict)
    new_config_file: Optional[str] = None


@dataclass
class ApplyOptions:
    dry_run: bool = False


def _plain(value: Any) -> Any:
    """tomlkit containers -> plain dict/list; JSON values pass through."""
    unwrap = getattr(value, 'unwrap', None)
    return unwrap() if callable(unwrap) else value


def _str_map(value: Any) -> Optional[Dict[str, str]]:
    if not isinstance(value, Mapping):
        return None
    return {str(k): str(v) for k, v in value.items()}


class HostAdapter:
    """
    Bidirectional translator between one host's native config and the unified spec.

    Subclasses set `descriptor`; the algorithm is shared.
    """

    descriptor: HostDescriptor = None

    def __init__(self, descriptor: Optional[HostDescriptor] = None):
        if descriptor is not None:
            self.descriptor = descriptor
        if self.descriptor is None:
            raise ValueError(f"{type(self).__name__} has no HostDescriptor")

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def label(self) -> str:
        return self.descriptor.label

    @property
    def scope(self) -> str:
        """The scope this host's server file represents."""
        return self.descriptor.scope

    @property
    def supports_skills(self) -> bool:
        return bool(self.descriptor.skill_dirs)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"

    # Locations

    def root(self, env: HostEnvironment, scope: str) -> Path:
        return env.repo_root if scope == 'repo' else env.home

    def config_path(self, env: HostEnvironment) -> Path:
        """First existing candidate file, else the file apply would create."""
        base = self.root(env, self.scope)
        for name in self.descriptor.config_files:
            if (base / name).is_file():
                return base / name
        return base / (self.descriptor.new_config_file or self.descriptor.config_files[0])

    def skill_scope(self, scope: str) -> str:
        """Scope a skill lands in; hosts with a single skill directory always use it."""
        dirs = self.descriptor.skill_dirs
        if scope in dirs:
            return scope
        if len(dirs) == 1:
            return next(iter(dirs))
        return self.scope

    def skill_dir(self, env: HostEnvironment, scope: str) -> Optional[Path]:
        scope = self.skill_scope(scope)
        rel = self.descriptor.skill_dirs.get(scope)
        return self.root(env, scope) / rel if rel else None

    # Native document helpers

    def _read_native(self, path: Path):
        return _READERS[self.descriptor.format](path)

    def _new_native(self):
        return tomlkit.document() if self.descriptor.format == 'toml' else {}

    def _dump_native(self, doc) -> str:
        return _WRITERS[self.descriptor.format](doc)

    def _servers_node(self, doc, path: Path, create: bool = False) -> Optional[MutableMapping]:
        """Server container inside `doc`; legacy locations are only read, null counts as absent."""
        candidates = [self.descriptor.fields.container]
        if not create:
            candidates.extend(self.descriptor.fields.legacy_containers)
        for keys in candidates:
            node = doc
            for key in keys:
                if node.get(key) is None:
                    if not create:
                        node = None
                        break
                    node[key] = {}
                node = node[key]
                if not isinstance(node, MutableMapping):
                    raise MalformedConfigError(path, f"'{'.'.join(keys)}' must be an object")
            if node is not None:
                return node
        return None

    # Translation

    def to_spec(self, name: str, native: Any) -> Optional[McpServerSpec]:
        """Canonical entry for one native server, or None if the shape is unrecognized."""
        if not isinstance(native, Mapping):
            return None
        f = self.descriptor.fields
        enabled = bool(native.get(f.enabled, True)) if f.enabled else True

        url = next((native[k] for k in f.url_keys if native.get(k)), None)
        if url:
            headers = _str_map(native.get(f.headers)) if f.headers else None
            transport = RemoteTransport(url=str(url), headers=sanitize_record(headers))
        elif native.get(f.command):
            command = native[f.command]
            if f.args is None:
                parts = [str(p) for p in command] if isinstance(command, list) else [str(command)]
                command, args = parts[0], parts[1:]
            else:
                raw_args = native.get(f.args)
                args = [str(a) for a in raw_args] if isinstance(raw_args, list) else []
            cwd = native.get(f.cwd) if f.cwd else None
            transport = StdioTransport(
                command=str(command),
                args=args,
                env=sanitize_record(_str_map(native.get(f.env))) or {},
                cwd=str(cwd) if cwd else None,
            )
        else:
            return None
        return McpServerSpec(name=name, enabled=enabled, scope=self.scope, transport=transport)

    def from_spec(self, server: McpServerSpec) -> Dict[str, Any]:
        """Native entry for one canonical server."""
        f = self.descriptor.fields
        t = server.transport
        out: Dict[str, Any] = {}
        if isinstance(t, RemoteTransport):
            if f.remote_tag:
                out[f.remote_tag[0]] = f.remote_tag[1]
            out[f.url_keys[0]] = t.url
            if f.headers and t.headers:
                out[f.headers] = dict(t.headers)
        else:
            if f.stdio_tag:
                out[f.stdio_tag[0]] = f.stdio_tag[1]
            if f.args is None:
                out[f.command] = [t.command] + list(t.args or [])
            else:
                out[f.command] = t.command
                out[f.args] = list(t.args or [])
            out[f.env] = dict(t.env or {})
            if f.cwd and t.cwd:
                out[f.cwd] = t.cwd
        if f.enabled:
            out[f.enabled] = server.enabled
        return out

    # Contract

    def import_from_system(self, env: HostEnvironment) -> ImportResult:
        """Read the native file; a missing file yields an empty result and a note."""
        result = ImportResult()
        path = self.config_path(env)
        shown = env.display(path)
        if not path.is_file():
            result.notes.append(f"{self.label} MCP config not found at {shown}")
            return result

        doc = self._read_native(path)
        servers = self._servers_node(doc, path) or {}
        for name, native in _plain(servers).items():
            try:
                server = self.to_spec(str(name), native)
            except ValidationError as e:
                logger.debug("%s: %s rejected: %s", self.id, name, e)
                server = None
            if server is None:
                result.notes.append(f"skipped unrecognized {self.label} server '{name}' in {shown}")
                continue
            result.mcp_servers.append(server)
        result.notes.append(f"found {self.label} MCP config at {shown}")
        logger.debug("%s: imported %d server(s) from %s", self.id, len(result.mcp_servers), path)
        return result

    def apply_from_spec(self, env: HostEnvironment, spec: ToolchainSpec,
                        options: Optional[ApplyOptions] = None) -> List[str]:
        """
        Merge the unified spec's entries for this host's scope into the native file.

        Overwrite-by-name: enabled entries replace same-name native entries,
        disabled entries are deleted, anything the unified spec does not mention is
        left alone.
        """
        options = options or ApplyOptions()
        logs: List[str] = []
        path = self.config_path(env)
        shown = env.display(path)
        scoped = [s for s in spec.mcp_servers if s.scope == self.scope]

        if not scoped and not path.is_file():
            logs.append(f"[{self.id}] no {self.scope}-scoped servers; skipped {shown}")
        else:
            doc = self._read_native(path) if path.is_file() else self._new_native()
            servers = self._servers_node(doc, path, create=True)
            for server in scoped:
                if server.enabled:
                    servers[server.name] = self.from_spec(server)
                elif server.name in servers:
                    del servers[server.name]
            logs.append(self._write(path, doc, shown, options.dry_run))

        if self.supports_skills:
            logs.extend(self._apply_skills(env, spec, options))
        return logs

    def _write(self, path: Path, doc, shown: str, dry_run: bool) -> str:
        if dry_run:
            return f"[{self.id}] would write {shown}"
        content = self._dump_native(doc)
        backup_file(path)
        write_text_atomic(path, content)
        return f"[{self.id}] wrote {shown}"

    def _apply_skills(self, env: HostEnvironment, spec: ToolchainSpec,
                      options: ApplyOptions) -> List[str]:
        logs = []
        for skill in spec.skills:
            src = env.resolve_in_repo(skill.path)
            dest_base = self.skill_dir(env, skill.scope)
            dest = dest_base / skill.name
            if dest.resolve() == src.resolve():
                continue
            if skill.enabled:
                if not is_skill_dir(src):
                    logs.append(f"[{self.id}] skipped skill {skill.name}: no SKILL.md in {env.display(src)}")
                    continue
                if options.dry_run:
                    logs.append(f"[{self.id}] would sync skill dir {env.display(src)} -> {env.display(dest)}")
                    continue
                copy_tree(src, dest)
                logs.append(f"[{self.id}] synced skill dir {env.display(src)} -> {env.display(dest)}")
            elif dest.is_dir():
                hidden = dest_base / DISABLED_DIR / skill.name
                if options.dry_run:
                    logs.append(f"[{self.id}] would move skill {env.display(dest)} -> {env.display(hidden)}")
                    continue
                move_tree(dest, hidden)
                logs.append(f"[{self.id}] moved skill {env.display(dest)} -> {env.display(hidden)}")
        return logs

    # Skills outside the unified spec

    def list_skills(self, env: HostEnvironment) -> List[SkillLocation]:
        found = []
        for scope in self.descriptor.skill_dirs:
            found.extend(list_skill_dirs(self.skill_dir(env, scope), self.id, scope))
        return found

    def install_skill(self, env: HostEnvironment, src_dir: Path, name: str,
                      scope: str, dry_run: bool = False) -> str:
        if not self.supports_skills:
            return f"[{self.id}] skills not supported; skipped {name}"
        dest = self.skill_dir(env, scope) / name
        if dry_run:
            return f"[{self.id}] would install skill {name} -> {env.display(dest)}"
        copy_tree(Path(src_dir), dest)
        return f"[{self.id}] installed skill {name} -> {env.display(dest)}"

    # Direct disable (bypasses the unified spec)

    def disable_server(self, env: HostEnvironment, name: str, dry_run: bool = False) -> List[str]:
        """Remove `name` from the native file, or flip the native enable flag."""
        path = self.config_path(env)
        shown = env.display(path)
        if not path.is_file():
            return [f"[{self.id}] no MCP config at {shown}"]
        doc = self._read_native(path)
        servers = self._servers_node(doc, path)
        if servers is None or name not in servers:
            return [f"[{self.id}] mcp server not found: {name}"]

        flag = self.descriptor.fields.enabled
        if flag:
            entry = servers[name]
            if not isinstance(entry, MutableMapping):
                raise MalformedConfigError(path, f"server '{name}' must be an object")
            entry[flag] = False
            if dry_run:
                return [f"[{self.id}] would set {name}.{flag}=false in {shown}"]
            self._write(path, doc, shown, dry_run=False)
            return [f"[{self.id}] disabled {name} in {shown}"]

        del servers[name]
        if dry_run:
            return [f"[{self.id}] would remove {name} from {shown}"]
        self._write(path, doc, shown, dry_run=False)
        return [f"[{self.id}] removed {name} from {shown}"]

    def disable_skill(self, env: HostEnvironment, name: str, scope: Optional[str] = None,
                      dry_run: bool = False) -> List[str]:
        """Move an installed skill into the host's .disabled/ directory."""
        if not self.supports_skills:
            raise UnsupportedOperationError(
                f"{self.label} has no skill directories; skill disable is not supported"
            )
        scope = self.skill_scope(scope or 'repo')
        base = self.skill_dir(env, scope)
        src = base / name
        if not src.is_dir():
            return [f"[{self.id}] skill not found: {scope}:{name}"]
        dest = base / DISABLED_DIR / name
        if dry_run:
            return [f"[{self.id}] would move skill {env.display(src)} -> {env.display(dest)}"]
        move_tree(src, dest)
        return [f"[{self.id}] disabled skill {scope}:{name}"]
