"""
Codex CLI host adapter.

Codex keeps its configuration in `~/.codex/config.toml`, so every server it
knows about is user-scoped:

[mcp_servers.fs]
command = "npx"
args = ["-y", "server"]

[mcp_servers.fs.env]
API_KEY = "${API_KEY}"

[mcp_servers.docs]
url = "https://example.com/mcp"

Older configs used a `mcpServers` table; it is still read on import but
never written. Remote servers carry only a URL (no headers). Skills are
installed under ~/.codex/skills/ only, whatever the skill's scope.

The rest of config.toml (model, profiles, ...) is preserved byte-for-byte by
editing the parsed tomlkit document in place.
"""

from adapters.base import FieldMap, HostAdapter, HostDescriptor

CODEX = HostDescriptor(
    id='codex',
    label='Codex',
    scope='user',
    config_files=('.codex/config.toml',),
    format='toml',
    fields=FieldMap(
        container=('mcp_servers',),
        legacy_containers=(('mcpServers',),),
        headers=None,
    ),
    skill_dirs={
        'user': '.codex/skills',
    },
)


class CodexAdapter(HostAdapter):
    """Adapter for Codex's `config.toml`."""

    descriptor = CODEX
