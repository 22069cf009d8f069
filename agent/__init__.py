# =============================================================================
# agent/__init__.py
# =============================================================================
# This package contains the Google ADK agent configuration.
#
# ARCHITECTURAL ROLE:
#   The agent/ layer orchestrates.  It:
#     1. Receives the user's question ("What's overdue for Sarah?")
#     2. Decides which tools to call (search_users, then a task query)
#     3. Interprets the envelopes that come back
#     4. Answers with numbers and highlighted risks
#
#   It holds no Asana logic (that's in core/) and no tool implementations
#   (that's in tools/).  The LLM behind it is picked by configuration and
#   reached through LiteLlm.
# =============================================================================
