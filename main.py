# =============================================================================
# main.py  —  Entry Point for the Project Management Assistant
# =============================================================================
#
# HOW TO RUN:
#   python main.py
#
# WHAT HAPPENS:
#   1. Loads .env and validates the LLM provider settings (exit 1 if invalid)
#   2. Creates the ADK agent (agent/pm_agent.py), which spawns the MCP tool
#      server as a subprocess
#   3. Reads questions from the console and streams them to the agent
#   4. Prints each tool call as it happens, then the final answer
#
# The tool server validates its own Asana settings when it starts.
# =============================================================================

import asyncio
import logging
import sys

from dotenv import load_dotenv

# Load .env BEFORE creating the agent: LiteLlm reads the provider API key
# from the environment when it initializes.
load_dotenv()

from google.adk.runners import Runner
from google.adk.sessions import InMemorySessionService
from google.genai import types

from agent.pm_agent import create_agent
from core.config import AgentSettings, ConfigError, load_agent_settings

APP_NAME = "pm_assistant"
USER_ID = "console_user"


async def run_agent(settings: AgentSettings):
    """Run the assistant interactively until the user quits."""
    print("=" * 70)
    print("  PROJECT MANAGEMENT ASSISTANT")
    print(f"  Powered by Google ADK + {settings.litellm_model} + FastMCP")
    print("=" * 70)
    print("\n🔧 Initializing agent...")
    agent = create_agent(settings)

    session_service = InMemorySessionService()
    runner = Runner(
        agent=agent,
        app_name=APP_NAME,
        session_service=session_service,
    )
    session = await session_service.create_session(app_name=APP_NAME, user_id=USER_ID)

    print("✅ Agent initialized and ready!\n")
    print("💬 Ask about tasks, projects, workload or due dates.")
    print("   (Type 'quit' to exit)\n")
    print("-" * 70)

    while True:
        try:
            user_input = input("\n🧑 You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\n\n👋 Goodbye!")
            break

        if user_input.lower() in ("quit", "exit", "q"):
            print("\n👋 Goodbye!")
            break

        if not user_input:
            continue

        user_message = types.Content(
            role="user",
            parts=[types.Part(text=user_input)],
        )

        print("\n🤖 Agent is thinking...\n")
        print("-" * 70)

        final_response = ""

        async for event in runner.run_async(
            user_id=USER_ID,
            session_id=session.id,
            new_message=user_message,
        ):
            if event.content and event.content.parts:
                for part in event.content.parts:
                    if part.text:
                        final_response = part.text

                    if part.function_call:
                        print(f"  🔧 Calling tool: {part.function_call.name}")

        print("-" * 70)
        if final_response:
            print(f"\n🤖 Agent:\n\n{final_response}")
        else:
            print("\n⚠️  No response generated. The agent may have encountered an error.")

        print("\n" + "=" * 70)


def main() -> None:
    try:
        settings = load_agent_settings()
    except ConfigError as exc:
        logging.error(f"Configuration error: {exc}")
        sys.exit(1)

    logging.basicConfig(level=settings.log_level, stream=sys.stderr)
    asyncio.run(run_agent(settings))


if __name__ == "__main__":
    main()
