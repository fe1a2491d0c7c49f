"""
HTTP middleware components for request/response processing.

This module provides the pipeline's middleware stages (HSTS, API
documentation, HTTPS redirection, static files) and centralized error
handling.
"""

import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, Optional, Union

from fastapi import Request, Response
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.staticfiles import StaticFiles

logger = logging.getLogger(__name__)

CallNext = Callable[[Request], Awaitable[Response]]


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware for centralized error handling."""

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        """Process request and handle errors."""
        try:
            return await call_next(request)

        except Exception as e:
            logger.exception(
                f"Unhandled error in {request.method} {request.url.path}: {e}")

            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error",
                    "message": str(e) if request.app.debug else "An unexpected error occurred",
                }
            )


class HSTSMiddleware(BaseHTTPMiddleware):
    """Adds Strict-Transport-Security to HTTPS responses."""

    def __init__(self,
                 app: Any,
                 max_age: int,
                 include_subdomains: bool = False,
                 preload: bool = False,
                 excluded_hosts: Iterable[str] = ()) -> None:
        super().__init__(app)
        directives = [f"max-age={max_age}"]
        if include_subdomains:
            directives.append("includeSubDomains")
        if preload:
            directives.append("preload")
        self.header_value = "; ".join(directives)
        self.excluded_hosts = {_normalize_host(h) for h in excluded_hosts}

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        response = await call_next(request)
        if request.url.scheme == "https" and \
                _normalize_host(request.url.hostname or "") not in self.excluded_hosts:
            response.headers["Strict-Transport-Security"] = self.header_value
        return response


class ApiDocumentationMiddleware(BaseHTTPMiddleware):
    """
    Serves the OpenAPI document and the Swagger UI.

    Requests for either path are answered before any later stage runs.
    """

    def __init__(self, app: Any, openapi_url: str, ui_path: str, name: str) -> None:
        super().__init__(app)
        self.openapi_url = openapi_url
        self.ui_path = ui_path
        self.name = name

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        if request.method not in ("GET", "HEAD"):
            return await call_next(request)

        path = request.url.path
        if path == self.openapi_url:
            return JSONResponse(request.app.openapi())
        if path == self.ui_path:
            return get_swagger_ui_html(
                openapi_url=self.openapi_url,
                title=f"{request.app.title} {self.name}")
        return await call_next(request)


class HTTPSRedirectionMiddleware(BaseHTTPMiddleware):
    """
    Redirects plain HTTP requests to HTTPS.

    Without a configured HTTPS port requests pass through unchanged and a
    warning is logged once.
    """

    def __init__(self, app: Any, https_port: Optional[int] = None) -> None:
        super().__init__(app)
        self.https_port = https_port
        self._warned = False

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        if request.url.scheme == "https":
            return await call_next(request)

        if self.https_port is None:
            if not self._warned:
                logger.warning("Failed to determine the https port for redirect")
                self._warned = True
            return await call_next(request)

        host = request.url.hostname or "localhost"
        if ":" in host:
            host = f"[{host}]"
        netloc = host if self.https_port == 443 else f"{host}:{self.https_port}"
        target = request.url.replace(scheme="https", netloc=netloc)
        return RedirectResponse(str(target), status_code=307)


class StaticFilesMiddleware(BaseHTTPMiddleware):
    """Serves existing files below a web root, handing everything else on."""

    def __init__(self, app: Any, directory: Union[str, Path]) -> None:
        super().__init__(app)
        self.directory = Path(directory)
        self._static = StaticFiles(directory=self.directory, check_dir=False)

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        if request.method in ("GET", "HEAD"):
            path = self._static.get_path(request.scope)
            try:
                return await self._static.get_response(path, request.scope)
            except StarletteHTTPException as e:
                if e.status_code != 404:
                    logger.warning(f"Static file {path} refused with {e.status_code}")
                    return Response(status_code=e.status_code, headers=e.headers)
        return await call_next(request)


def _normalize_host(host: str) -> str:
    return host.strip("[]").lower()
