"""
Antigravity host adapter.

Antigravity keeps MCP servers per user in
`~/.gemini/antigravity/mcp_config.json` under `mcpServers`, with the usual
command/args/env and url/headers shapes and no type tag.

Skill directories:
- Workspace-level: .agent/skills/
- User-level: ~/.gemini/antigravity/skills/
"""

from adapters.base import FieldMap, HostAdapter, HostDescriptor

ANTIGRAVITY = HostDescriptor(
    id='antigravity',
    label='Antigravity',
    scope='user',
    config_files=('.gemini/antigravity/mcp_config.json',),
    format='json',
    fields=FieldMap(container=('mcpServers',)),
    skill_dirs={
        'repo': '.agent/skills',
        'user': '.gemini/antigravity/skills',
    },
)


class AntigravityAdapter(HostAdapter):
    """Adapter for Antigravity's user-level MCP config."""

    descriptor = ANTIGRAVITY
