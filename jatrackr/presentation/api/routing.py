"""
Convention-based routing of URL paths to controller actions.

A route template such as ``{controller}/{action=Index}/{id?}`` is matched
segment by segment; the controller is picked by name and the action by name
and HTTP method, both case-insensitively. Paths that no route handles can
be answered with a static entry document.
"""

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple, Type, TypeVar, Union
from urllib.parse import unquote

from fastapi import FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from starlette.requests import Request
from starlette.responses import FileResponse, JSONResponse, Response
from starlette.routing import BaseRoute, Match, NoMatchFound
from starlette.types import Receive, Scope, Send

logger = logging.getLogger(__name__)

M = TypeVar('M', bound=BaseModel)

ActionHandler = Callable[[Request, Optional[str]], Awaitable[Any]]

_PARAMETER = re.compile(r"^\{(?P<name>\w+)(?:=(?P<default>[^}?]*))?(?P<optional>\?)?\}$")


@dataclass(frozen=True)
class TemplateSegment:
    """One path segment of a route template."""
    literal: Optional[str] = None
    name: Optional[str] = None
    default: Optional[str] = None
    optional: bool = False

    @property
    def is_parameter(self) -> bool:
        return self.name is not None

    @property
    def can_be_omitted(self) -> bool:
        return self.is_parameter and (self.optional or self.default is not None)


class RouteTemplate:
    """Parsed route template with required, defaulted and optional parameters."""

    def __init__(self, template: str) -> None:
        self.template = template
        self.segments = self._parse(template)

    @property
    def parameter_names(self) -> List[str]:
        return [s.name for s in self.segments if s.name is not None]

    @staticmethod
    def _parse(template: str) -> Tuple[TemplateSegment, ...]:
        segments: List[TemplateSegment] = []
        for part in template.strip("/").split("/"):
            if not part:
                raise ValueError(f"Empty segment in route template '{template}'")
            match = _PARAMETER.match(part)
            if match:
                segments.append(TemplateSegment(
                    name=match.group("name"),
                    default=match.group("default"),
                    optional=match.group("optional") is not None))
            elif "{" in part or "}" in part:
                raise ValueError(f"Malformed parameter '{part}' in route template '{template}'")
            else:
                segments.append(TemplateSegment(literal=part))

        # Once a segment may be omitted, every later one must be omittable too
        seen_omittable = False
        for segment in segments:
            if segment.can_be_omitted:
                seen_omittable = True
            elif seen_omittable:
                raise ValueError(
                    f"Required segment follows an optional one in route template '{template}'")
        return tuple(segments)

    def match(self, path: str) -> Optional[Dict[str, Optional[str]]]:
        """
        Match a request path against the template.

        Returns:
            Parameter values (defaults and None filled in for omitted
            segments), or None if the path does not match
        """
        stripped = path.strip("/")
        parts = stripped.split("/") if stripped else []
        if len(parts) > len(self.segments):
            return None

        values: Dict[str, Optional[str]] = {}
        for index, segment in enumerate(self.segments):
            if index < len(parts):
                part = parts[index]
                if not part:
                    return None
                if segment.literal is not None:
                    if part.lower() != segment.literal.lower():
                        return None
                    continue
                values[segment.name] = unquote(part)  # type: ignore[index]
            elif segment.can_be_omitted:
                values[segment.name] = segment.default  # type: ignore[index]
            else:
                return None
        return values

    def __repr__(self) -> str:
        return f"RouteTemplate({self.template!r})"


def action(*methods: str, name: Optional[str] = None) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Mark a controller coroutine as a routable action.

    Args:
        methods: HTTP methods the action answers, GET when omitted
        name: Action name used in URLs, defaults to the function name
    """
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        func.__action_name__ = (name or func.__name__).lower()  # type: ignore[attr-defined]
        func.__action_methods__ = tuple(m.upper() for m in methods) or ("GET",)  # type: ignore[attr-defined]
        return func
    return decorator


class Controller:
    """
    Base class for convention-routed controllers.

    Subclasses set ``route_name`` and decorate coroutines taking
    ``(request, id)`` with :func:`action`.
    """

    route_name: str = ""

    def __init__(self) -> None:
        self._actions: Dict[str, Dict[str, ActionHandler]] = {}
        for attr in dir(type(self)):
            func = getattr(type(self), attr, None)
            action_name = getattr(func, "__action_name__", None)
            if action_name is None:
                continue
            by_method = self._actions.setdefault(action_name, {})
            for method in func.__action_methods__:  # type: ignore[union-attr]
                by_method[method] = getattr(self, attr)

    @property
    def name(self) -> str:
        return (self.route_name or type(self).__name__.replace("Controller", "")).lower()

    @property
    def actions(self) -> Dict[str, Tuple[str, ...]]:
        """Action names mapped to the HTTP methods they accept."""
        return {name: tuple(sorted(methods)) for name, methods in self._actions.items()}

    def find_action(self, action_name: str, method: str) -> Optional[ActionHandler]:
        handlers = self._actions.get(action_name.lower())
        if not handlers:
            return None
        method = method.upper()
        if method == "HEAD" and "HEAD" not in handlers:
            method = "GET"
        return handlers.get(method)

    @staticmethod
    def require_id(id: Optional[str]) -> str:
        """Return the ``id`` route value, or fail with 400 when it was omitted."""
        if not id:
            raise HTTPException(status_code=400, detail="An id is required for this action")
        return id

    @staticmethod
    def found(value: Optional[Any], entity: str, key: Optional[str]) -> Any:
        """Return ``value``, or fail with 404 when it is None."""
        if value is None:
            raise HTTPException(status_code=404, detail=f"{entity} '{key}' not found")
        return value

    async def read_body(self, request: Request, model: Type[M]) -> M:
        """
        Parse the JSON request body into ``model``.

        Raises:
            HTTPException: 400 if the body is not valid JSON
            RequestValidationError: If the body does not fit the model
        """
        try:
            payload = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise HTTPException(status_code=400, detail="Request body must be valid JSON")
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise RequestValidationError(e.errors(include_url=False), body=payload)


class ConventionRoute(BaseRoute):
    """Starlette route dispatching template matches to controller actions."""

    def __init__(self,
                 template: Union[str, RouteTemplate],
                 controllers: Mapping[str, Controller],
                 name: str = "default") -> None:
        self.template = template if isinstance(template, RouteTemplate) else RouteTemplate(template)
        missing = {"controller", "action"} - set(self.template.parameter_names)
        if missing:
            raise ValueError(
                f"Route template '{self.template.template}' lacks {sorted(missing)}")
        self.controllers = {c.lower(): controller for c, controller in controllers.items()}
        self.name = name

    def matches(self, scope: Scope) -> Tuple[Match, Scope]:
        if scope["type"] != "http":
            return Match.NONE, {}

        values = self.template.match(scope["path"])
        if values is None:
            return Match.NONE, {}

        controller = self.controllers.get((values.get("controller") or "").lower())
        if controller is None:
            return Match.NONE, {}

        handler = controller.find_action(values.get("action") or "", scope["method"])
        if handler is None:
            return Match.NONE, {}

        path_params = dict(scope.get("path_params", {}))
        path_params.update(values)
        return Match.FULL, {"endpoint": handler, "path_params": path_params}

    async def handle(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        handler: ActionHandler = scope["endpoint"]
        result = await handler(request, scope["path_params"].get("id"))
        if isinstance(result, Response):
            response = result
        elif result is None:
            response = Response(status_code=204)
        else:
            response = JSONResponse(jsonable_encoder(result))
        await response(scope, receive, send)

    def url_path_for(self, name: str, /, **path_params: Any) -> Any:
        raise NoMatchFound(name, path_params)

    def __repr__(self) -> str:
        return f"ConventionRoute(name={self.name!r}, template={self.template.template!r})"


def map_controller_route(app: FastAPI,
                         controllers: Mapping[str, Controller],
                         template: str,
                         name: str = "default") -> ConventionRoute:
    """Append a convention route for ``controllers`` to the application router."""
    route = ConventionRoute(template, controllers, name=name)
    app.router.routes.append(route)
    logger.debug(f"Mapped controller route '{name}': {template} -> {sorted(route.controllers)}")
    return route


def map_fallback_to_file(app: FastAPI, directory: Union[str, Path], file_name: str) -> None:
    """
    Answer otherwise unmatched GET/HEAD requests with a static entry document.

    Paths whose last segment looks like a file name (contains a dot) are
    not rewritten and yield 404.
    """
    entry_file = Path(directory) / file_name

    async def fallback(request: Request) -> Response:
        last_segment = request.path_params.get("path", "").rstrip("/").rsplit("/", 1)[-1]
        if "." in last_segment:
            raise HTTPException(status_code=404)
        if not entry_file.is_file():
            raise HTTPException(status_code=404)
        return FileResponse(entry_file)

    # GET only (Starlette adds HEAD); other methods get the router's 404/405
    app.add_route("/{path:path}", fallback, methods=["GET"], include_in_schema=False)
