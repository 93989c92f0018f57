# =============================================================================
# main.py  —  Entry Point for the Stellar Swap MCP Server
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py          (or the installed `stellar-swap-mcp`)
#
# WHAT HAPPENS:
#   1. Loads a .env file, if present, into the environment
#   2. Reads STELLAR_NETWORK / API keys ONCE into an immutable AppConfig
#   3. Builds the adapters and the operation dispatcher
#   4. Serves the tool catalog over stdio until the client disconnects
#
# An unsupported STELLAR_NETWORK value stops the process here, before the
# server starts.
# =============================================================================

from dotenv import load_dotenv

from core.config import AppConfig
from tools.mcp_server import main as serve


def main() -> None:
    # Must run before AppConfig.from_env() reads the environment.
    load_dotenv()
    serve(AppConfig.from_env())


if __name__ == "__main__":
    main()
