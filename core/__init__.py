"""
Core of the MCP server and skill toolchain.

- models: canonical spec entries (pydantic)
- merge / redact: pure spec transformations
- spec_io / fileio: YAML spec and native file persistence
- registry / orchestrator: host selection and the sync operations
"""
