import logging
from contextlib import AsyncExitStack

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.api.user import router as user_router
from app.connections import mongo_lifespan
from app.connections.storage import AssetStore
from app.services.container import build_services
from app.utils.config import Settings, settings
from app.utils.errors import ApiError
from app.utils.response import error_response, failure_body


logger = logging.getLogger(__name__)

LIMITED_CONTENT_TYPES = ("application/json", "application/x-www-form-urlencoded")
BODY_TOO_LARGE = "Request body too large"


class BodySizeLimitMiddleware:
    """Rejects JSON and urlencoded bodies larger than `max_bytes` with 413.

    A declared `Content-Length` is checked up front; bodies without one
    (chunked) are counted as the application reads them.
    """

    def __init__(self, app: ASGIApp, max_bytes: int) -> None:
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        if not headers.get("content-type", "").startswith(LIMITED_CONTENT_TYPES):
            await self.app(scope, receive, send)
            return

        length = headers.get("content-length", "")
        if length.isdigit() and int(length) > self.max_bytes:
            response = JSONResponse(status_code=413, content=failure_body(413, BODY_TOO_LARGE))
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    raise StarletteHTTPException(status_code=413, detail=BODY_TOO_LARGE)
            return message

        await self.app(scope, limited_receive, send)


async def combined_lifespan(app: FastAPI):
    async with AsyncExitStack() as stack:
        await stack.enter_async_context(mongo_lifespan(app))

        yield


async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    return error_response(exc)


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=failure_body(exc.status_code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [{"field": ".".join(map(str, e.get("loc", ()))), "message": e.get("msg")} for e in exc.errors()]
    return JSONResponse(status_code=400, content=failure_body(400, "Invalid request", errors))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(status_code=500, content=failure_body(500, "Something went wrong"))


def create_app(config: Settings = settings, asset_store: AssetStore | None = None) -> FastAPI:
    """Build the application. The Mongo connection is opened by the lifespan."""
    app = FastAPI(title=config.app_name, debug=config.debug, version="0.1.0", lifespan=combined_lifespan)
    app.state.services = build_services(config, asset_store)

    app.add_exception_handler(ApiError, handle_api_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.add_middleware(BodySizeLimitMiddleware, max_bytes=config.max_body_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(user_router, prefix="/api/v1/users")
    return app
