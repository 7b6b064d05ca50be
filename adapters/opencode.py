"""
opencode host adapter.

opencode reads `opencode.jsonc` or `opencode.json` from the repository root
(JSON with comments allowed). MCP servers live under `mcp` and carry their
own enable flag:

{
  "mcp": {
    "fs": {"type": "local", "command": ["npx", "-y", "server"],
           "environment": {}, "enabled": true},
    "docs": {"type": "remote", "url": "https://example.com/mcp",
             "headers": {}, "enabled": false}
  }
}

Command and arguments are a single list. Imported entries keep the native
`enabled` value. opencode has no skill directories.

Writing goes to whichever of the two files exists (opencode.json when
neither does); comments in a .jsonc file are not preserved.
"""

from adapters.base import FieldMap, HostAdapter, HostDescriptor

OPENCODE = HostDescriptor(
    id='opencode',
    label='opencode',
    scope='repo',
    config_files=('opencode.jsonc', 'opencode.json'),
    new_config_file='opencode.json',
    format='jsonc',
    fields=FieldMap(
        container=('mcp',),
        args=None,
        env='environment',
        stdio_tag=('type', 'local'),
        remote_tag=('type', 'remote'),
        enabled='enabled',
    ),
)


class OpencodeAdapter(HostAdapter):
    """Adapter for opencode project config."""

    descriptor = OPENCODE
