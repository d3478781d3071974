"""stdio entry point for the Linear MCP server."""

import asyncio
import logging

from mcp.server.stdio import stdio_server

from .config import get_settings
from .http_client import close_http_client, get_http_client
from .observability.logging import configure_logging
from .observability.metrics import configure_metrics, start_metrics_server
from .server import LinearMCPServer
from .session import LinearSession

logger = logging.getLogger(__name__)


async def serve() -> None:
    """Run the MCP server over stdin/stdout until the client disconnects."""
    settings = get_settings()

    configure_logging(environment=settings.environment, log_level=settings.log_level)
    configure_metrics(settings.enable_metrics)
    if settings.enable_metrics:
        start_metrics_server(settings.metrics_port, settings.metrics_addr)

    session = LinearSession.from_settings(settings)
    mcp_server = LinearMCPServer(session, name=settings.app_name)

    # Warm up HTTP client (creates connection pool)
    get_http_client(settings.request_timeout)

    logger.info(
        "%s v%s starting (authenticated=%s)",
        settings.app_name,
        settings.app_version,
        session.auth.is_authenticated(),
    )
    try:
        async with stdio_server() as (read_stream, write_stream):
            await mcp_server.server.run(
                read_stream,
                write_stream,
                mcp_server.server.create_initialization_options(),
            )
    finally:
        await close_http_client()
        logger.info("%s stopped", settings.app_name)


def main() -> None:
    asyncio.run(serve())


if __name__ == "__main__":
    main()
