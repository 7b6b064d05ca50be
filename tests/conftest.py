"""Shared test fixtures for mcp-skill-tool."""

import shutil
from pathlib import Path

import pytest

from cli.main import setup_registry
from core.orchestrator import ToolchainOrchestrator
from core.paths import HostEnvironment

FIXTURES = Path(__file__).parent / 'fixtures'

# host id -> (root, path inside that root, sample file)
NATIVE_FILES = {
    'claude-code': ('repo', '.mcp.json', 'claude_mcp.json'),
    'gemini-cli': ('repo', '.gemini/settings.json', 'gemini_settings.json'),
    'codex': ('home', '.codex/config.toml', 'codex_config.toml'),
    'opencode': ('repo', 'opencode.jsonc', 'opencode.jsonc'),
    'antigravity': ('home', '.gemini/antigravity/mcp_config.json', 'antigravity_mcp_config.json'),
}


@pytest.fixture
def env(tmp_path: Path) -> HostEnvironment:
    """Synthetic repository and home roots."""
    repo = tmp_path / 'repo'
    home = tmp_path / 'home'
    repo.mkdir()
    home.mkdir()
    return HostEnvironment(repo_root=repo, home=home)


@pytest.fixture
def registry():
    return setup_registry()


@pytest.fixture
def orchestrator(env, registry) -> ToolchainOrchestrator:
    return ToolchainOrchestrator(env, registry)


@pytest.fixture
def install_native(env):
    """Copy a host's sample config into place; returns the installed path."""

    def _install(host_id: str) -> Path:
        root, rel, fixture = NATIVE_FILES[host_id]
        dest = (env.repo_root if root == 'repo' else env.home) / rel
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy(FIXTURES / fixture, dest)
        return dest

    return _install


@pytest.fixture
def make_skill():
    """Create `<base>/<name>/SKILL.md`; returns the skill directory."""

    def _make(base: Path, name: str, body: str = "# skill\n") -> Path:
        skill_dir = base / name
        skill_dir.mkdir(parents=True, exist_ok=True)
        (skill_dir / 'SKILL.md').write_text(body)
        return skill_dir

    return _make
