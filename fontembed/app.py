"""
FastAPI application for the font embedding service.

Provides REST API endpoints that turn Google Fonts families into
self-contained CSS and proxy the Google Fonts catalog, with error handling,
request logging, and health checks.

License: MIT
"""

import time
import json
import logging
from typing import Any, AsyncIterator, Dict

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from fontembed.catalog import CatalogUnavailableError, get_catalog
from fontembed.config import settings
from fontembed.embedding import create_http_client, embed_fonts
from fontembed.errors import EmbeddingError, InternalError
from fontembed.models import FontSearchOptions

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Font Embedding API",
    version="1.0.0",
    description="Embeds Google Fonts as base64 data URIs for offline rendering and export",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """Provide a request-scoped HTTP client for outbound font requests."""
    async with create_http_client() as client:
        yield client


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing information."""
    start_time = time.time()

    response = await call_next(request)

    duration = time.time() - start_time
    logger.info(
        f"{request.method} {request.url.path} "
        f"completed in {duration:.3f}s with status {response.status_code}"
    )

    return response


@app.get("/health")
async def health_check() -> Dict[str, str]:
    """
    Health check endpoint.

    Returns:
        Status dictionary indicating service health
    """
    return {"status": "ok"}


@app.post("/api/embed-fonts")
async def embed_fonts_endpoint(
    request: Request,
    client: httpx.AsyncClient = Depends(get_http_client)
) -> Dict[str, Any]:
    """
    Embed Google Fonts families as base64 @font-face rules.

    Families that cannot be embedded are skipped; the response still
    succeeds with whatever could be embedded.

    Args:
        request: FastAPI request object, body {"fonts": [{"family", "weights"}]}
        client: HTTP client for Google Fonts requests

    Returns:
        JSON with the combined CSS and the number of families embedded

    Raises:
        InvalidRequestError: If no fonts are provided
        InternalError: On unexpected failures
    """
    try:
        start_time = time.time()

        data = json.loads(await request.body())
        if not isinstance(data, dict):
            raise ValueError("Request body must be a JSON object")

        result = await embed_fonts(client, data.get("fonts"))

        logger.info(
            f"Embedded {result.fonts_embedded} font family(ies) "
            f"({len(result.css)} bytes of CSS) in {time.time() - start_time:.3f}s"
        )

        return result.model_dump(by_alias=True)

    except EmbeddingError:
        raise

    except Exception as e:
        logger.error(f"Font embedding API error: {str(e)}", exc_info=True)
        raise InternalError(str(e)) from e


@app.post("/api/fonts")
async def list_fonts(
    request: Request,
    client: httpx.AsyncClient = Depends(get_http_client)
):
    """
    Proxy the Google Fonts catalog with optional sort/category/subset filters.

    Without a configured API key the endpoint answers 200 with an empty
    item list so clients can fall back to their bundled fonts.
    """
    api_key = settings.google_fonts_api_key
    if not api_key:
        return JSONResponse(
            status_code=200,
            content={"error": "Google Fonts API key not configured", "items": []}
        )

    try:
        raw_body = await request.body()
        options = FontSearchOptions.model_validate_json(raw_body) if raw_body.strip() else FontSearchOptions()
        return await get_catalog(client, options, api_key)

    except CatalogUnavailableError as e:
        return JSONResponse(
            status_code=e.status_code,
            content={
                "error": "Failed to fetch fonts from Google Fonts API",
                "details": f"Status: {e.status_code}"
            }
        )

    except Exception as e:
        logger.error(f"Error in fonts API route: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "details": str(e)}
        )


@app.get("/api/fonts")
async def list_fonts_get():
    """Reject GET; filters are sent as a JSON body."""
    return JSONResponse(
        status_code=405,
        content={"error": "Use POST method to fetch fonts with options"}
    )


@app.exception_handler(EmbeddingError)
async def embedding_error_handler(request: Request, exc: EmbeddingError):
    """Map request-level embedding errors to their public message."""
    if exc.status_code >= 500:
        logger.error(f"Embedding failed: {str(exc)}")
    else:
        logger.warning(f"Rejected request: {str(exc)}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.public_message}
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors."""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "detail": str(exc)}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
