"""Partmaster server - KiCad HTTP library API and MCP tools over CSV partmaster files."""

import argparse
import json
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Callable

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from . import __version__
from .config import HTTP_HOST, HTTP_PORT, KICAD_API_TOKEN, LOG_LEVEL, PARTMASTER_DIR
from .errors import CSVError, InvalidFormatError, PartmasterError, PartNotFoundError
from .kicad import KiCadLibrary, PartUpdate
from .partmaster import Partmaster

logger = logging.getLogger(__name__)

# Global state
_library: KiCadLibrary | None = None


def get_library() -> KiCadLibrary:
    """Library for the configured partmaster directory, loaded on first use."""
    global _library
    if _library is None:
        _library = KiCadLibrary(Partmaster.load(PARTMASTER_DIR))
    return _library


def set_library(library: KiCadLibrary | None) -> None:
    global _library
    _library = library


@asynccontextmanager
async def lifespan(app):
    """Load the partmaster on startup rather than on the first request."""
    library = get_library()
    logger.info(f"Partmaster ready: {len(library.partmaster)} parts from {library.partmaster.directory}")
    yield


mcp = FastMCP(
    name="partmaster",
    instructions="Internal parts catalog (IPN CCC-NNN-VVVV) backed by CSV partmaster files. Use plm_list_categories and plm_list_parts to browse, plm_get_part for every field of one part, plm_get_sources for all manufacturer sources of an IPN. plm_update_part and plm_new_revision write to the partmaster files.",
    lifespan=lifespan,
)


class TokenAuthMiddleware(BaseHTTPMiddleware):
    """Shared-secret check: requires ``Authorization: Token <token>``.

    Disabled when no token is configured. /health is always open.
    """

    def __init__(self, app, token: str = KICAD_API_TOKEN):
        super().__init__(app)
        self.token = token

    async def dispatch(self, request, call_next):
        if not self.token or request.url.path == "/health":
            return await call_next(request)

        if request.headers.get("authorization") != f"Token {self.token}":
            return JSONResponse(status_code=401, content={"error": "Unauthorized"})
        return await call_next(request)


def _error_response(e: PartmasterError) -> JSONResponse:
    """Map catalog errors to HTTP status codes."""
    if isinstance(e, PartNotFoundError):
        return JSONResponse(status_code=404, content={"error": str(e)})
    if isinstance(e, InvalidFormatError):
        return JSONResponse(status_code=400, content={"error": str(e)})
    logger.error(f"Partmaster request failed: {type(e).__name__}: {e}")
    return JSONResponse(status_code=500, content={"error": "Partmaster operation failed. Check server logs for details."})


def _base_url(request: Request) -> str:
    scheme = request.url.scheme
    if request.headers.get("x-forwarded-proto") == "https":
        scheme = "https"
    host = request.headers.get("host") or request.url.netloc
    return f"{scheme}://{host}{request.url.path.rstrip('/')}"


# KiCad HTTP library endpoints

async def kicad_root(request: Request):
    base = _base_url(request)
    return JSONResponse({
        "categories": f"{base}/categories.json",
        "parts": f"{base}/parts",
    })


async def kicad_categories(request: Request):
    categories = get_library().list_categories()
    return JSONResponse([c.to_dict() for c in categories])


async def kicad_parts_by_category(request: Request):
    category_id = request.path_params["category_id"]
    parts = get_library().list_parts(category_id)
    return JSONResponse([p.to_dict() for p in parts])


async def kicad_part_detail(request: Request):
    part_id = request.path_params["part_id"]
    library = get_library()

    try:
        if request.method == "PUT":
            try:
                body = await request.json()
            except (json.JSONDecodeError, UnicodeDecodeError):
                return JSONResponse(status_code=400, content={"error": "Bad request"})
            part = library.update_part(part_id, PartUpdate.from_dict(body))
        else:
            part = library.get_part_detail(part_id)
    except PartmasterError as e:
        return _error_response(e)
    return JSONResponse(part.to_dict())


async def kicad_part_revision(request: Request):
    part_id = request.path_params["part_id"]
    try:
        part = get_library().start_new_revision(part_id)
    except PartmasterError as e:
        return _error_response(e)
    return JSONResponse(part.to_dict())


def kicad_routes() -> list[Route]:
    """KiCad HTTP library API v1 routes. Order matters: .json routes first."""
    return [
        Route("/v1", kicad_root, methods=["GET"]),
        Route("/v1/", kicad_root, methods=["GET"]),
        Route("/v1/categories.json", kicad_categories, methods=["GET"]),
        Route("/v1/parts/category/{category_id}.json", kicad_parts_by_category, methods=["GET"]),
        Route("/v1/parts/category/{category_id}", kicad_parts_by_category, methods=["GET"]),
        Route("/v1/parts/{part_id}/revision", kicad_part_revision, methods=["POST"]),
        Route("/v1/parts/{part_id}.json", kicad_part_detail, methods=["GET", "PUT"]),
        Route("/v1/parts/{part_id}", kicad_part_detail, methods=["GET", "PUT"]),
    ]


# MCP tools

def _run_tool(name: str, fn: Callable[[], Any]) -> dict:
    """Run a library call, turning catalog errors into error dicts."""
    try:
        return fn()
    except (PartNotFoundError, InvalidFormatError) as e:
        return {"error": str(e)}
    except CSVError as e:
        logger.error(f"{name} failed: {type(e).__name__}: {e}")
        return {"error": f"{name} failed. Check server logs for details."}


@mcp.tool(
    annotations=ToolAnnotations(
        title="List Part Categories",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def plm_list_categories() -> dict:
    """List part categories found in the partmaster.

    Returns:
        categories: List of {id, name, description}. id is the three-letter
        IPN category code (e.g. "CAP", "RES", "PCA").
    """
    categories = get_library().list_categories()
    return {"total": len(categories), "categories": [c.to_dict() for c in categories]}


@mcp.tool(
    annotations=ToolAnnotations(
        title="List Parts In Category",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def plm_list_parts(category: str) -> dict:
    """List the parts of one category.

    Args:
        category: Category code, e.g. "CAP"

    Returns:
        parts: List of {id, name, description}; id is the IPN
    """
    category = category.strip().upper()
    parts = get_library().list_parts(category)
    return {"category": category, "total": len(parts), "parts": [p.to_dict() for p in parts]}


@mcp.tool(
    annotations=ToolAnnotations(
        title="Get Part",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def plm_get_part(ipn: str) -> dict:
    """Get every non-empty partmaster field of one part.

    Args:
        ipn: Internal part number, e.g. "CAP-001-0001"
    """
    return _run_tool("plm_get_part", lambda: get_library().get_part_detail(ipn.strip()).to_dict())


@mcp.tool(
    annotations=ToolAnnotations(
        title="Get Part Sources",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def plm_get_sources(ipn: str) -> dict:
    """Get all manufacturer sources of a part, highest priority first.

    Description, footprint and value are shared between sources: blanks are
    filled from the other sources of the same IPN.

    Args:
        ipn: Internal part number, e.g. "CAP-001-0001"
    """
    ipn = ipn.strip()

    def sources():
        found = get_library().get_part_sources(ipn)
        return {"ipn": ipn, "total": len(found), "sources": found}

    return _run_tool("plm_get_sources", sources)


@mcp.tool(
    annotations=ToolAnnotations(
        title="Update Part",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def plm_update_part(
    ipn: str,
    description: str = "",
    sources: list[dict[str, str]] | None = None,
) -> dict:
    """Update the description and manufacturer sources of a part.

    Args:
        ipn: Internal part number
        description: New description (empty leaves it unchanged)
        sources: List of {"manufacturer": ..., "mpn": ...}. The first source is
                 written to Manufacturer/MPN, the second to Manufacturer2/MPN2, etc.

    Returns:
        The updated part, as plm_get_part
    """
    def update():
        req = PartUpdate.from_dict({"description": description, "sources": sources or []})
        return get_library().update_part(ipn.strip(), req).to_dict()

    return _run_tool("plm_update_part", update)


@mcp.tool(
    annotations=ToolAnnotations(
        title="Start New Revision",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=False,
    )
)
async def plm_new_revision(ipn: str) -> dict:
    """Copy a part to the next revision (CAP-001-0004 -> CAP-001-0005).

    The existing revision is kept.

    Args:
        ipn: Internal part number of the revision to copy
    """
    return _run_tool("plm_new_revision", lambda: get_library().start_new_revision(ipn.strip()).to_dict())


# Health check endpoint
async def health(request):
    return JSONResponse({
        "status": "healthy",
        "service": "partmaster-mcp",
        "version": __version__,
    })


# Create ASGI app
def create_app(token: str = KICAD_API_TOKEN):
    """Create the ASGI application."""
    middleware = [
        Middleware(TokenAuthMiddleware, token=token),
    ]

    app = mcp.http_app(
        path="/mcp",
        middleware=middleware,
        transport="streamable-http",
        stateless_http=True,
    )

    app.routes.extend(kicad_routes())
    app.routes.append(Route("/health", health))

    return app


app = create_app()


class _HealthFilterLog(logging.Filter):
    """Suppress noisy /health access logs from Docker healthchecks."""

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        return "/health" not in msg


def main():
    """Run the server."""
    import uvicorn

    parser = argparse.ArgumentParser(description="Serve a partmaster directory as a KiCad HTTP library")
    parser.add_argument(
        "--dir", "-d",
        type=Path,
        default=Path(PARTMASTER_DIR),
        help=f"Directory with partmaster CSV files (default: {PARTMASTER_DIR})",
    )
    parser.add_argument("--host", default=HTTP_HOST, help=f"Listen address (default: {HTTP_HOST})")
    parser.add_argument("--port", "-p", type=int, default=HTTP_PORT, help=f"Listen port (default: {HTTP_PORT})")
    parser.add_argument(
        "--token",
        default=KICAD_API_TOKEN,
        help="Shared secret expected as 'Authorization: Token <token>' (default: $KICAD_API_TOKEN)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("uvicorn.access").addFilter(_HealthFilterLog())

    set_library(KiCadLibrary(Partmaster.load(args.dir)))
    logger.info(f"KiCad HTTP library: http://localhost:{args.port}/v1/")

    uvicorn.run(
        create_app(token=args.token),
        host=args.host,
        port=args.port,
        lifespan="on",
    )


if __name__ == "__main__":
    main()
