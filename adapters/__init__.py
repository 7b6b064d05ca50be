"""
Host adapters for translating between native tool configs and the unified spec.

Each adapter is the shared HostAdapter algorithm bound to one HostDescriptor.
An adapter knows how to:
- Locate the host's MCP config file (repo root or home directory)
- Import native server entries as canonical McpServerSpec entries
- Apply a spec back onto the native file (overwrite-by-name merge)
- Install, list and disable skill directories where the host has them

Available adapters (in default order):
- AntigravityAdapter: ~/.gemini/antigravity/mcp_config.json (user)
- ClaudeCodeAdapter: .mcp.json (repo)
- GeminiCliAdapter: .gemini/settings.json (repo)
- CodexAdapter: ~/.codex/config.toml (user)
- OpencodeAdapter: opencode.jsonc / opencode.json (repo)

Adding a new host:
1. Create yourhost.py declaring a HostDescriptor
2. Subclass HostAdapter with `descriptor = YOUR_HOST`
3. Add it to default_adapters()
"""

from typing import List

from .antigravity import AntigravityAdapter
from .base import ApplyOptions, FieldMap, HostAdapter, HostDescriptor
from .claude_code import ClaudeCodeAdapter
from .codex import CodexAdapter
from .gemini_cli import GeminiCliAdapter
from .opencode import OpencodeAdapter


def default_adapters() -> List[HostAdapter]:
    return [
        AntigravityAdapter(),
        ClaudeCodeAdapter(),
        GeminiCliAdapter(),
        CodexAdapter(),
        OpencodeAdapter(),
    ]


__all__ = [
    'AntigravityAdapter',
    'ApplyOptions',
    'ClaudeCodeAdapter',
    'CodexAdapter',
    'FieldMap',
    'GeminiCliAdapter',
    'HostAdapter',
    'HostDescriptor',
    'OpencodeAdapter',
    'default_adapters',
]
