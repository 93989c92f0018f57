# =============================================================================
# tools/__init__.py
# =============================================================================
# This package contains the FastMCP binding.
#
# ARCHITECTURAL ROLE:
#   tools/ is the "translation layer" between MCP and core/.  It:
#     1. Declares one typed FastMCP tool per catalog operation
#     2. Forwards each call to core.dispatcher.OperationDispatcher
#     3. Turns an error ToolResult into a FastMCP ToolError
#
# WHAT TOOLS DO NOT DO:
#   - They do NOT validate arguments or fill defaults (the dispatcher does)
#   - They do NOT talk to any backend (the adapters do)
# =============================================================================
