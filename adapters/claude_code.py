"""
Claude Code host adapter.

Claude Code keeps project MCP servers in `.mcp.json` at the repository root:

{
  "mcpServers": {
    "fs": {"command": "npx", "args": ["-y", "server"], "env": {}},
    "docs": {"type": "sse", "url": "https://example.com/sse", "headers": {}}
  }
}

Skills are directories containing SKILL.md under:
- Project-level: .claude/skills/
- User-level: ~/.claude/skills/

This adapter:
- Pins servers to the repo scope (.mcp.json is shared via version control)
- Writes remote servers with `type: sse`
- Treats an entry carrying both `url` and `command` as remote
"""

from adapters.base import FieldMap, HostAdapter, HostDescriptor

CLAUDE_CODE = HostDescriptor(
    id='claude-code',
    label='Claude Code',
    scope='repo',
    config_files=('.mcp.json',),
    format='json',
    fields=FieldMap(
        container=('mcpServers',),
        remote_tag=('type', 'sse'),
    ),
    skill_dirs={
        'repo': '.claude/skills',
        'user': '.claude/skills',
    },
)


class ClaudeCodeAdapter(HostAdapter):
    """Adapter for Claude Code's `.mcp.json`."""

    descriptor = CLAUDE_CODE
