"""
Gemini CLI host adapter.

Gemini CLI reads project settings from `.gemini/settings.json`. MCP servers
live under `mcpServers`; a stdio server may carry a working directory
(`cwd`), and a remote server is either `url` (SSE) or `httpUrl`
(streamable HTTP). On import `url` takes precedence over `httpUrl`; on
apply remote servers are always written with `url`.

Skill directories:
- Project-level: .gemini/skills/
- User-level: ~/.gemini/skills/
"""

from adapters.base import FieldMap, HostAdapter, HostDescriptor

GEMINI_CLI = HostDescriptor(
    id='gemini-cli',
    label='Gemini CLI',
    scope='repo',
    config_files=('.gemini/settings.json',),
    format='json',
    fields=FieldMap(
        container=('mcpServers',),
        cwd='cwd',
        url_keys=('url', 'httpUrl'),
    ),
    skill_dirs={
        'repo': '.gemini/skills',
        'user': '.gemini/skills',
    },
)


class GeminiCliAdapter(HostAdapter):
    """Adapter for Gemini CLI project settings."""

    descriptor = GEMINI_CLI
