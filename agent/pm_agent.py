# =============================================================================
# agent/pm_agent.py  —  Google ADK Agent Configuration
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Creates the ADK agent: system prompt from agent/prompt.py, an LLM chosen
#   by AgentSettings (via LiteLlm), and the FastMCP tool server from
#   tools/mcp_server.py as its only tool source.
#
# ADK + LiteLlm:
#   ADK handles orchestration (tool calling, sessions).  LiteLlm lets the
#   agent reason with any provider; the model string decides which:
#     "anthropic/claude-3-5-sonnet-20241022"
#     "openai/gpt-4o"
#     "gemini/gemini-1.5-pro-latest"
#     "openrouter/openai/gpt-4o"
#   LiteLlm reads the provider's API key from the environment.
#
# MCP CONNECTION:
#   ADK starts the tool server as a subprocess and talks to it over
#   stdin/stdout.  The subprocess runs with this interpreter and inherits
#   the environment, so it sees the same ASANA_* settings.
#
#   ┌──────────────┐  stdio  ┌─────────────────────┐  HTTPS  ┌───────────┐
#   │  ADK Agent   │────────▶│  tools/mcp_server   │────────▶│  Asana    │
#   │  (LiteLlm)   │◀────────│  → core/ queries    │◀────────│  REST API │
#   └──────────────┘         └─────────────────────┘         └───────────┘
# =============================================================================

import os
import sys

from google.adk.agents import Agent
from google.adk.models.lite_llm import LiteLlm
from google.adk.tools.mcp_tool import MCPToolset
from mcp import StdioServerParameters

from agent.prompt import get_pm_assistant_prompt
from core.config import AgentSettings


def create_agent(settings: AgentSettings) -> Agent:
    """Create the project management assistant agent.

    Args:
        settings: Provider and model selection from load_agent_settings().

    Returns:
        A configured Google ADK Agent instance.
    """
    # Run the server as a module from the project root so `core` and
    # `tools` resolve without an install.
    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

    mcp_tools = MCPToolset(
        connection_params=StdioServerParameters(
            command=sys.executable,
            args=["-m", "tools.mcp_server"],
            cwd=project_root,
            env=dict(os.environ),
        ),
    )

    agent = Agent(
        name="pm_assistant",
        model=LiteLlm(model=settings.litellm_model),
        instruction=get_pm_assistant_prompt(),
        tools=[mcp_tools],
    )

    return agent
