# =============================================================================
# tools/__init__.py
# =============================================================================
# This package contains the FastMCP tool wrappers.
#
# ARCHITECTURAL ROLE:
#   tools/ translates between the agent and core/.  Each tool:
#     1. Logs the call and its parameters
#     2. Awaits one core/ query function with the shared AsanaClient
#     3. Logs and returns the envelope dict unchanged
#
# WHAT TOOLS DO NOT DO:
#   - They do NOT filter, group or sort tasks (that's in core/)
#   - They do NOT raise; core/ already flattened failures into envelopes
#   - They do NOT know about Google ADK
#
# Tool names, parameter names and docstrings are the contract the LLM
# reads when deciding which tool to call.
# =============================================================================
