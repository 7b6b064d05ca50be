"""Command-line interface for mcp-skill-tool."""
