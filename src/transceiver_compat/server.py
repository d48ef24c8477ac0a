"""Transceiver Compatibility MCP Server - find optics that fit a switch model."""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from starlette.responses import JSONResponse
from starlette.routing import Route

from . import __version__
from .config import HTTP_PORT, LOG_LEVEL, MAX_QUERY_LENGTH
from .errors import LoadError, ReloadThrottled
from .result import QueryOutcome
from .stats import get_stats
from .store import close_store, get_store

logger = logging.getLogger(__name__)

# Access-log paths hit by container healthchecks
QUIET_ACCESS_PATHS = ("/health",)


@asynccontextmanager
async def lifespan(app):
    """Load the dataset on startup (not on first request)."""
    store = get_store()
    snapshot = store.snapshot
    if snapshot is not None:
        logger.info(f"Dataset ready: {len(snapshot.products)} products")
    else:
        logger.warning(f"Starting without data: {store.load_error}")

    yield

    close_store()


# Create MCP server
mcp = FastMCP(
    name="transceiver-compat",
    instructions="Transceiver compatibility lookup. Use compat_search with a switch model (e.g. C9300-48P) to get compatible transceiver SKUs grouped by uplink module or fixed port group. Use compat_list_switches to see which switch models are known.",
    lifespan=lifespan,
)


# Tools

@mcp.tool(
    annotations=ToolAnnotations(
        title="Find Compatible Transceivers",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def compat_search(query: str) -> dict:
    """Find transceivers compatible with a switch model.

    Args:
        query: Switch model, case-insensitive (e.g., "C9300-48P", "c9300-24ux")

    Returns:
        status: "results", "empty" or "failed"
        searched_term: Normalized switch model that was searched
        groups: One entry per uplink module / fixed port group with at least one
            compatible product. Each has module_or_port_id, slot_kind
            ("fixed" or "module"), heading and products (sku, oem_part_number,
            description, product_url, optical characteristics)
        total_products: Number of products across all groups
        notice: Present when the dataset could not be loaded
        error: Present when status is "failed"
    """
    if query and len(query) > MAX_QUERY_LENGTH:
        return QueryOutcome.failed(f"Query too long (max {MAX_QUERY_LENGTH} characters)").to_dict()

    return get_store().search(query).to_dict()


@mcp.tool(
    annotations=ToolAnnotations(
        title="List Switch Models",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def compat_list_switches() -> dict:
    """List every switch model present in the compatibility dataset.

    Returns:
        switch_models: Model names sorted alphabetically
        total: Number of models
    """
    store = get_store()
    if store.snapshot is None:
        return {"error": "Compatibility data is not available", "switch_models": [], "total": 0}
    models = store.list_switch_models()
    return {"switch_models": models, "total": len(models)}


@mcp.tool(
    annotations=ToolAnnotations(
        title="Dataset Statistics",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def compat_stats() -> dict:
    """Row counts and data-quality counts for the loaded dataset."""
    return get_store().get_stats()


@mcp.tool(
    annotations=ToolAnnotations(
        title="Reload Dataset",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=True,
    )
)
async def compat_reload() -> dict:
    """Reload the compatibility dataset from its source.

    The previous dataset keeps serving queries if the reload fails. Reloads
    are limited to one per RELOAD_MIN_INTERVAL seconds.

    Returns:
        Statistics of the new dataset, or an error with the failure kind
        ("unavailable", "malformed" or "throttled")
    """
    try:
        snapshot = await asyncio.to_thread(get_store().reload)
    except ReloadThrottled as e:
        return {"error": str(e), "kind": "throttled", "retry_after": round(e.retry_after, 1)}
    except LoadError as e:
        return {"error": f"Reload failed: {e.message}", "kind": e.kind}
    return {"reloaded": True, **get_stats(snapshot)}


async def health(request):
    """Liveness plus whether a dataset snapshot is being served."""
    return JSONResponse({
        "status": "healthy",
        "service": "transceiver-compat",
        "version": __version__,
        "data_loaded": get_store().snapshot is not None,
    })


def create_app():
    """ASGI app: MCP over streamable HTTP at /mcp plus GET /health."""
    app = mcp.http_app(path="/mcp", transport="streamable-http", stateless_http=True)
    app.routes.append(Route("/health", health, methods=["GET"]))
    return app


app = create_app()


class _QuietAccessLog(logging.Filter):
    """Drop access-log lines for the given request paths."""

    def __init__(self, paths: tuple[str, ...] = QUIET_ACCESS_PATHS):
        super().__init__()
        self.paths = paths

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        return not any(path in msg for path in self.paths)


def main():
    """Run the server."""
    import uvicorn

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("uvicorn.access").addFilter(_QuietAccessLog())

    uvicorn.run(
        "transceiver_compat.server:app",
        host="0.0.0.0",
        port=HTTP_PORT,
        lifespan="on",
    )


if __name__ == "__main__":
    main()
