#!/usr/bin/env python3
"""
Main entry point for the Dissertation Examiner MCP Server
"""
import asyncio
import logging
import os
import sys

from .config import config

logger = logging.getLogger(__name__)


def configure_logging():
    """Log to file; add console output only when running standalone"""
    os.makedirs(config.logs_dir, exist_ok=True)

    # stdio carries the MCP protocol when not attached to a terminal
    is_mcp_mode = not sys.stdin.isatty() or not sys.stdout.isatty()

    handlers = [logging.FileHandler(os.path.join(config.logs_dir, "dissertation_examiner.log"),
                                    encoding="utf-8")]
    if not is_mcp_mode:
        handlers.append(logging.StreamHandler(sys.stderr))

    logging.basicConfig(
        level=config.log_level_value,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def check_installation() -> bool:
    """Check dependencies and configuration without contacting the API"""
    print("Checking Dissertation Examiner installation...")
    print()

    try:
        import google.generativeai  # noqa: F401
        print("[OK] Google Generative AI library installed")
    except ImportError as e:
        print(f"[FAIL] Missing dependency: {e}")
        return False

    try:
        from mcp.server import Server  # noqa: F401
        print("[OK] MCP library installed")
    except ImportError as e:
        print(f"[FAIL] Missing MCP dependency: {e}")
        return False

    if config.has_api_key:
        print("[OK] API key configured")
    else:
        print("[FAIL] No API key configured")
        print("   Please add GOOGLE_API_KEY to the environment or .env file")
        return False

    print(f"[OK] Analysis model: {config.analysis_model}, chat model: {config.chat_model}")
    return True


async def serve():
    """Start the server; configuration problems are logged, not fatal"""
    from .mcp_server import ExaminerMcpServer

    logger.info("=" * 60)
    logger.info("Dissertation Examiner MCP Server Starting")
    config.log_configuration_status()
    logger.info("=" * 60)

    server = ExaminerMcpServer()
    await server.run()


def main():
    if len(sys.argv) > 1 and sys.argv[1] == "--check":
        sys.exit(0 if check_installation() else 1)

    configure_logging()
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
