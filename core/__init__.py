# =============================================================================
# core/__init__.py
# =============================================================================
# This package contains ALL the logic of the Stellar swap/vault tool server:
# configuration, records, the backend clients, the two data adapters with
# their fallback chains, and the operation dispatcher.
#
# CRITICAL ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP or any other transport.  The
#   dispatcher takes {operation name, arguments} and returns a ToolResult;
#   how those arrive (stdio MCP, a test, a REPL) is somebody else's job.
# =============================================================================
