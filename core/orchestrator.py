"""
Synchronization orchestration.

ToolchainOrchestrator composes the host adapters and the merge engine into
the product's operations:
- discover: import from hosts and report, no spec involved
- import_merge: fold host discoveries and repo skills into the unified spec
- apply: push the unified spec onto hosts
- sync: copy entries from one host straight to others (spec untouched)
- target_disable: remove one entry from one host directly (spec untouched)
plus the unified spec-only operations init, set_enabled, sanitize and status.

Hosts are processed strictly in the order requested and their log lines are
returned in that order. The first failure aborts the whole operation.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from adapters.base import ApplyOptions, HostAdapter
from core.errors import ToolchainError, UnknownIdentifierError
from core.merge import merge_spec, normalize_spec, sanitize_spec, set_enabled
from core.models import ENTRY_KINDS, SPEC_VERSION, ImportResult, ToolchainSpec, empty_spec
from core.paths import HostEnvironment
from core.redact import redact_object
from core.registry import HostRegistry
from core.skills import SkillLocation, scan_repo_skills
from core.spec_io import DEFAULT_SPEC_PATH, init_spec_if_missing, load_spec, save_spec

logger = logging.getLogger(__name__)


class ToolchainOrchestrator:
    """
    Runs spec and host operations for one repository/home pair.

    Args:
        env: Repository root and home directory
        registry: Registered host adapters
        spec_path: Unified spec location (relative paths resolve against the repo root)
    """

    def __init__(self, env: HostEnvironment, registry: HostRegistry,
                 spec_path: Optional[Union[str, Path]] = None):
        self.env = env
        self.registry = registry
        self.spec_path = env.resolve_in_repo(spec_path or DEFAULT_SPEC_PATH)

    # Spec lifecycle

    def init(self) -> bool:
        return init_spec_if_missing(self.spec_path)

    def load(self) -> ToolchainSpec:
        if not self.spec_path.is_file():
            raise ToolchainError(
                f"Spec not found: {self.spec_path} (run 'init' or 'import' first)"
            )
        return load_spec(self.spec_path)

    def set_enabled(self, kind: str, name: str, enabled: bool,
                    scope: Optional[str] = None) -> ToolchainSpec:
        spec = set_enabled(self.load(), kind, name, enabled, scope)
        save_spec(self.spec_path, spec)
        logger.info("%s %s %s", 'Enabled' if enabled else 'Disabled', kind, name)
        return spec

    def sanitize(self) -> ToolchainSpec:
        spec = sanitize_spec(self.load())
        save_spec(self.spec_path, spec)
        return spec

    def status(self, host_ids: Optional[Sequence[str]] = None) -> Dict[str, Any]:
        """Redacted spec plus, per host, the entries an apply would touch."""
        spec = self.load()
        hosts = {}
        for adapter in self.registry.resolve(host_ids):
            scoped = [s for s in spec.mcp_servers if s.scope == adapter.scope]
            report = {
                'scope': adapter.scope,
                'config': self.env.display(adapter.config_path(self.env)),
                'write': [s.name for s in scoped if s.enabled],
                'remove': [s.name for s in scoped if not s.enabled],
            }
            if adapter.supports_skills:
                report['skills'] = [sk.name for sk in spec.skills if sk.enabled]
            hosts[adapter.id] = report
        return {
            'repo': str(self.env.repo_root),
            'spec': redact_object(normalize_spec(spec).to_document()),
            'hosts': hosts,
        }

    # Host operations

    def discover(self, host_ids: Optional[Sequence[str]] = None) -> List[Tuple[HostAdapter, ImportResult]]:
        return [(a, a.import_from_system(self.env)) for a in self.registry.resolve(host_ids)]

    def discover_skills(self, host_ids: Optional[Sequence[str]] = None) -> List[SkillLocation]:
        found = []
        for adapter in self.registry.resolve(host_ids):
            found.extend(adapter.list_skills(self.env))
        return sorted(found, key=lambda s: (s.host, s.scope, s.name))

    def import_merge(self, host_ids: Optional[Sequence[str]] = None) -> Tuple[ToolchainSpec, List[str]]:
        """
        Merge host discoveries and repo skills into the unified spec and save it.

        Existing spec entries always win over rediscovered ones. Everything is
        read before the unified spec is written, so a malformed host file leaves the
        spec untouched.
        """
        adapters = self.registry.resolve(host_ids)
        spec = load_spec(self.spec_path) if self.spec_path.is_file() else empty_spec()
        notes = []
        for adapter in adapters:
            result = adapter.import_from_system(self.env)
            spec = merge_spec(spec, result)
            notes.extend(f"[{adapter.id}] {note}" for note in result.notes)
            logger.info("Imported %d server(s) from %s", len(result.mcp_servers), adapter.id)

        spec = merge_spec(spec, ImportResult(skills=scan_repo_skills(self.env.repo_root)))
        spec = sanitize_spec(spec)
        save_spec(self.spec_path, spec)
        return spec, notes

    def apply(self, host_ids: Optional[Sequence[str]] = None, dry_run: bool = False) -> List[str]:
        spec = self.load()
        adapters = self.registry.resolve(host_ids)
        options = ApplyOptions(dry_run=dry_run)
        logs = []
        for adapter in adapters:
            logs.extend(adapter.apply_from_spec(self.env, spec, options))
        return logs

    def sync(self, source: str, destinations: Sequence[str],
             mcp_names: Optional[Sequence[str]] = None,
             skill_names: Optional[Sequence[str]] = None,
             dest_scope: str = 'repo', dry_run: bool = False) -> List[str]:
        """
        Copy entries from one host's live config to other hosts.

        Servers are re-stamped with each destination's own scope and applied
        through a throwaway spec; the unified spec file is never read or
        written. Servers are always copied, every one or only `mcp_names`;
        `skill_names` additionally installs those skills.
        """
        if not destinations:
            raise ToolchainError("sync needs at least one destination host")
        src = self.registry.resolve_one(source)
        dests = self.registry.resolve(destinations)
        logs: List[str] = []

        logs.extend(self._sync_servers(src, dests, mcp_names, dry_run))
        if skill_names:
            logs.extend(self._sync_skills(src, dests, skill_names, dest_scope, dry_run))
        return logs

    def _sync_servers(self, src: HostAdapter, dests: List[HostAdapter],
                      names: Optional[Sequence[str]], dry_run: bool) -> List[str]:
        logs = []
        selected = src.import_from_system(self.env).mcp_servers
        if names:
            selected = [s for s in selected if s.name in names]
            found = {s.name for s in selected}
            logs.extend(f"[{src.id}] mcp server not found: {n}" for n in names if n not in found)
        if not selected:
            logs.append(f"no MCP servers to sync from {src.id}")
            return logs

        options = ApplyOptions(dry_run=dry_run)
        for dst in dests:
            spec = ToolchainSpec(
                version=SPEC_VERSION,
                mcp_servers=[s.model_copy(update={'scope': dst.scope}) for s in selected],
            )
            logs.extend(dst.apply_from_spec(self.env, spec, options))
        return logs

    def _sync_skills(self, src: HostAdapter, dests: List[HostAdapter],
                     names: Sequence[str], dest_scope: str, dry_run: bool) -> List[str]:
        chosen: Dict[str, SkillLocation] = {}
        for loc in src.list_skills(self.env):
            if loc.name in names and loc.name not in chosen:
                chosen[loc.name] = loc
        if not chosen:
            return [f"no matching skills found in source host {src.id}"]
        logs = []
        for dst in dests:
            for loc in chosen.values():
                logs.append(dst.install_skill(self.env, loc.dir, loc.name, dest_scope, dry_run))
        return logs

    def target_disable(self, host_id: str, kind: str, name: str,
                       scope: Optional[str] = None, dry_run: bool = False) -> List[str]:
        """Disable one server or skill directly in a host's files."""
        if kind not in ENTRY_KINDS:
            raise UnknownIdentifierError('entry kind', kind, ENTRY_KINDS)
        adapter = self.registry.resolve_one(host_id)
        if kind == 'mcp':
            return adapter.disable_server(self.env, name, dry_run)
        return adapter.disable_skill(self.env, name, scope, dry_run)
