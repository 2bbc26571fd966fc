"""doc-boost: full-text documentation search for the command line and MCP clients."""

__version__ = "1.0.0"
