"""
Integration tests for ToolchainOrchestrator over synthetic repo/home roots.

Tests cover:
- import: merge, sanitize, base-wins, idempotence, repo skills
- apply: per-host writes, dry-run, enable/disable round trip
- sync: host-to-host copy with scope re-stamping and skills
- target-disable, status, sanitize
"""

import json

import pytest
import tomlkit
import yaml

from core.errors import (
    MalformedConfigError,
    ToolchainError,
    UnknownIdentifierError,
    UnsupportedOperationError,
)
from core.spec_io import load_spec


def write_spec(orchestrator, document):
    orchestrator.spec_path.write_text(yaml.safe_dump(document))


class TestImport:
    """Tests for import_merge."""

    def test_creates_sanitized_spec(self, orchestrator, install_native):
        """Test that imported secrets are stored as placeholders."""
        install_native('claude-code')
        spec, notes = orchestrator.import_merge(['claude-code'])

        fs = next(s for s in spec.mcp_servers if s.name == 'fs')
        assert fs.transport.env['API_KEY'] == '${API_KEY}'
        assert 'sk_live_abc123' not in orchestrator.spec_path.read_text()
        assert '[claude-code] found Claude Code MCP config at .mcp.json' in notes

    def test_base_wins(self, orchestrator, install_native):
        """Test that existing spec entries beat rediscovered ones."""
        install_native('gemini-cli')
        write_spec(orchestrator, {
            'version': 1,
            'mcpServers': [{'name': 'db', 'transport': {'kind': 'stdio', 'command': 'my-db'}}],
        })
        spec, _ = orchestrator.import_merge(['gemini-cli'])
        db = next(s for s in spec.mcp_servers if s.name == 'db')
        assert db.transport.command == 'my-db'
        assert {s.name for s in spec.mcp_servers} == {'db', 'search'}

    def test_idempotent(self, orchestrator, install_native):
        """Test that a second import leaves the unified spec byte-identical."""
        install_native('claude-code')
        install_native('codex')
        orchestrator.import_merge()
        first = orchestrator.spec_path.read_text()
        orchestrator.import_merge()
        assert orchestrator.spec_path.read_text() == first

    def test_scopes_follow_hosts(self, orchestrator, install_native):
        """Test that entries take the scope of the host they came from."""
        install_native('claude-code')
        install_native('codex')
        spec, _ = orchestrator.import_merge(['claude-code', 'codex'])
        assert [s.key for s in spec.mcp_servers] == ['repo:docs', 'user:docs', 'repo:fs', 'user:fs']

    def test_repo_skills_added(self, orchestrator, env, make_skill):
        """Test that repo skills/ entries are added to the unified spec."""
        make_skill(env.repo_root / 'skills', 'review')
        spec, _ = orchestrator.import_merge(['opencode'])
        assert [(s.name, s.path) for s in spec.skills] == [('review', 'skills/review')]

    def test_malformed_host_aborts_before_write(self, orchestrator, env):
        """Test that a malformed host file leaves the unified spec unwritten."""
        (env.repo_root / '.mcp.json').write_text('{not json')
        with pytest.raises(MalformedConfigError):
            orchestrator.import_merge(['claude-code'])
        assert not orchestrator.spec_path.exists()

    def test_unknown_host(self, orchestrator):
        """Test that an unknown host id lists the valid ones."""
        with pytest.raises(UnknownIdentifierError, match="Valid: antigravity"):
            orchestrator.import_merge(['cursor'])


class TestApply:
    """Tests for apply."""

    @pytest.fixture
    def spec_document(self):
        return {
            'version': 1,
            'mcpServers': [
                {'name': 'fs', 'scope': 'repo',
                 'transport': {'kind': 'stdio', 'command': 'npx', 'args': ['-y', 'fs']}},
                {'name': 'notes', 'scope': 'user',
                 'transport': {'kind': 'remote', 'url': 'https://notes.example.com/mcp'}},
            ],
            'skills': [],
        }

    def test_missing_spec(self, orchestrator):
        """Test applying without a spec file."""
        with pytest.raises(ToolchainError, match="Spec not found"):
            orchestrator.apply()

    def test_writes_each_host_by_scope(self, orchestrator, env, spec_document):
        """Test that each host receives only entries of its own scope."""
        write_spec(orchestrator, spec_document)
        logs = orchestrator.apply(['claude-code', 'codex'])

        assert logs[0] == '[claude-code] wrote .mcp.json'
        assert logs[1].startswith('[codex] wrote ')
        claude = json.loads((env.repo_root / '.mcp.json').read_text())
        assert set(claude['mcpServers']) == {'fs'}
        codex = tomlkit.parse((env.home / '.codex' / 'config.toml').read_text())
        assert set(codex['mcp_servers']) == {'notes'}

    def test_dry_run(self, orchestrator, env, install_native, spec_document):
        """Test that a dry run reports without touching the file."""
        path = install_native('claude-code')
        write_spec(orchestrator, spec_document)
        before = path.read_bytes()
        mtime = path.stat().st_mtime_ns

        logs = orchestrator.apply(['claude-code'], dry_run=True)

        assert logs == ['[claude-code] would write .mcp.json']
        assert path.read_bytes() == before
        assert path.stat().st_mtime_ns == mtime

    def test_disable_then_enable(self, orchestrator, env, spec_document):
        """Test removing and restoring a server through the unified spec."""
        write_spec(orchestrator, spec_document)
        path = env.repo_root / '.mcp.json'

        orchestrator.set_enabled('mcp', 'fs', False)
        orchestrator.apply(['claude-code'])
        assert 'fs' not in json.loads(path.read_text())['mcpServers']

        orchestrator.set_enabled('mcp', 'fs', True)
        orchestrator.apply(['claude-code'])
        assert 'fs' in json.loads(path.read_text())['mcpServers']

    def test_round_trip(self, orchestrator, env, install_native):
        """Test that import, apply and re-import agree for Gemini CLI."""
        install_native('gemini-cli')
        spec, _ = orchestrator.import_merge(['gemini-cli'])
        (env.repo_root / '.gemini' / 'settings.json').unlink()

        orchestrator.apply(['gemini-cli'])
        again = orchestrator.discover(['gemini-cli'])[0][1]
        assert again.mcp_servers == [s for s in spec.mcp_servers if s.enabled]


class TestSync:
    """Tests for host-to-host sync."""

    def test_selected_server_gets_destination_scope(self, orchestrator, env, install_native):
        """Test that a synced server is re-stamped with the destination scope."""
        install_native('gemini-cli')
        logs = orchestrator.sync('gemini-cli', ['codex'], mcp_names=['db'])

        assert logs[0].startswith('[codex] wrote ')
        doc = tomlkit.parse((env.home / '.codex' / 'config.toml').read_text())
        assert set(doc['mcp_servers']) == {'db'}
        imported = orchestrator.discover(['codex'])[0][1].mcp_servers
        assert [(s.name, s.scope) for s in imported] == [('db', 'user')]
        assert not orchestrator.spec_path.exists()

    def test_all_servers_by_default(self, orchestrator, env, install_native):
        """Test that every source server is copied when none are named."""
        install_native('claude-code')
        orchestrator.sync('claude-code', ['opencode'])
        data = json.loads((env.repo_root / 'opencode.json').read_text())
        assert set(data['mcp']) == {'fs', 'docs'}

    def test_missing_name_logged(self, orchestrator, install_native):
        """Test that unknown server names are logged, not raised."""
        install_native('claude-code')
        logs = orchestrator.sync('claude-code', ['gemini-cli'], mcp_names=['nope'])
        assert logs == [
            '[claude-code] mcp server not found: nope',
            'no MCP servers to sync from claude-code',
        ]

    def test_skills_also_copy_servers(self, orchestrator, env, install_native, make_skill):
        """Test that naming skills still copies the source servers."""
        install_native('claude-code')
        make_skill(env.repo_root / '.claude' / 'skills', 'review')
        logs = orchestrator.sync('claude-code', ['codex', 'opencode'], skill_names=['review'])

        assert (env.home / '.codex' / 'skills' / 'review' / 'SKILL.md').is_file()
        doc = tomlkit.parse((env.home / '.codex' / 'config.toml').read_text())
        assert {'fs', 'docs'} <= set(doc['mcp_servers'])
        assert '[opencode] wrote opencode.json' in logs
        assert logs[-1] == '[opencode] skills not supported; skipped review'

    def test_skills_without_source_servers(self, orchestrator, env, make_skill):
        """Test syncing skills from a host that has no MCP config."""
        make_skill(env.repo_root / '.claude' / 'skills', 'review')
        logs = orchestrator.sync('claude-code', ['codex'], skill_names=['review'])

        assert logs[0] == 'no MCP servers to sync from claude-code'
        assert logs[1].startswith('[codex] installed skill review -> ')
        assert not (env.home / '.codex' / 'config.toml').exists()

    def test_skills_dest_scope(self, orchestrator, env, make_skill):
        """Test installing synced skills at user scope."""
        make_skill(env.repo_root / '.claude' / 'skills', 'review')
        orchestrator.sync('claude-code', ['antigravity'], skill_names=['review'], dest_scope='user')
        assert (env.home / '.gemini' / 'antigravity' / 'skills' / 'review').is_dir()

    def test_no_matching_skills(self, orchestrator):
        """Test syncing skill names the source does not have."""
        logs = orchestrator.sync('opencode', ['codex'], skill_names=['review'])
        assert logs == [
            'no MCP servers to sync from opencode',
            'no matching skills found in source host opencode',
        ]

    def test_dry_run(self, orchestrator, env, install_native):
        """Test that a dry-run sync writes nothing."""
        install_native('gemini-cli')
        logs = orchestrator.sync('gemini-cli', ['claude-code'], dry_run=True)
        assert logs == ['[claude-code] would write .mcp.json']
        assert not (env.repo_root / '.mcp.json').exists()

    def test_requires_destination(self, orchestrator):
        """Test that sync needs at least one destination."""
        with pytest.raises(ToolchainError):
            orchestrator.sync('codex', [])


class TestTargetDisable:
    """Tests for target_disable."""

    def test_server(self, orchestrator, env, install_native):
        """Test removing a server directly from a host file."""
        install_native('codex')
        logs = orchestrator.target_disable('codex', 'mcp', 'fs')
        assert logs[0].startswith('[codex] removed fs from ')

    def test_skill(self, orchestrator, env, make_skill):
        """Test disabling a skill directly in a host skills directory."""
        make_skill(env.repo_root / '.gemini' / 'skills', 'review')
        logs = orchestrator.target_disable('gemini-cli', 'skill', 'review')
        assert logs == ['[gemini-cli] disabled skill repo:review']

    def test_skill_on_opencode(self, orchestrator):
        """Test that opencode rejects skill operations."""
        with pytest.raises(UnsupportedOperationError):
            orchestrator.target_disable('opencode', 'skill', 'review')

    def test_unknown_kind(self, orchestrator):
        """Test rejecting an unknown entry kind."""
        with pytest.raises(UnknownIdentifierError, match="entry kind"):
            orchestrator.target_disable('codex', 'agent', 'x')


class TestSpecOperations:
    """Tests for init, sanitize and status."""

    def test_init(self, orchestrator, env):
        """Test that init only creates the unified spec once."""
        assert orchestrator.init() is True
        assert orchestrator.init() is False
        assert (env.repo_root / 'skills').is_dir()

    def test_sanitize(self, orchestrator):
        """Test that sanitize rewrites literal secrets in the unified spec."""
        write_spec(orchestrator, {
            'version': 1,
            'mcpServers': [{'name': 'fs', 'transport': {
                'kind': 'stdio', 'command': 'npx', 'env': {'API_KEY': 'sk_live_abc123'}}}],
        })
        orchestrator.sanitize()
        spec = load_spec(orchestrator.spec_path)
        assert spec.mcp_servers[0].transport.env == {'API_KEY': '${API_KEY}'}

    def test_status_redacts(self, orchestrator):
        """Test that status masks secrets and reports per-host changes."""
        write_spec(orchestrator, {
            'version': 1,
            'mcpServers': [
                {'name': 'docs', 'transport': {
                    'kind': 'remote', 'url': 'https://x.io/mcp',
                    'headers': {'Authorization': 'Bearer live-token'}}},
                {'name': 'old', 'enabled': False, 'transport': {'kind': 'stdio', 'command': 'x'}},
            ],
        })
        status = orchestrator.status(['claude-code', 'opencode'])

        headers = status['spec']['mcpServers'][0]['transport']['headers']
        assert headers == {'Authorization': 'Bearer ***'}
        assert status['hosts']['claude-code']['write'] == ['docs']
        assert status['hosts']['claude-code']['remove'] == ['old']
        assert 'skills' not in status['hosts']['opencode']
        # status never rewrites the unified spec
        assert 'live-token' in orchestrator.spec_path.read_text()
