"""FastAPI application entrypoint."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse

from app.core.gateway_middleware import AuthorizationGatewayMiddleware
from app.errors import NOT_FOUND_MESSAGE, ApiError
from app.repositories.memory import InMemoryStore
from app.routes import (
    admin_router,
    auth_router,
    collections_router,
    electron_router,
    library_router,
    pages_router,
    shared_router,
)
from app.schemas.error import NoLeakNotFoundError

# Responses issued by the gateway never show up as route dependencies, so the
# documented codes per operation are pinned here.
_OPENAPI_RESPONSE_CODES: dict[str, dict[str, set[str]]] = {
    "/api/shared/{token}": {"get": {"200", "404"}},
    "/api/shared/{token}/books/{bookId}": {"get": {"200", "404"}},
    "/api/shared/{token}/books/{bookId}/file": {"get": {"200", "206", "404", "416"}},
    "/api/shared/{token}/books/{bookId}/book.epub": {"get": {"200", "206", "404", "416"}},
    "/api/shared/{token}/books/{bookId}/cover": {"get": {"200", "404"}},
    "/api/collections/{collectionId}/share": {
        "get": {"200", "401", "404"},
        "post": {"200", "401", "404"},
        "delete": {"200", "401", "404"},
    },
    "/api/library/events": {"get": {"200", "401"}},
    "/api/admin/library/clear": {"post": {"200", "401", "403"}},
    "/api/electron/clear-books": {"post": {"200", "403"}},
    "/api/auth/session": {"get": {"200"}},
}

_SHARED_API_PREFIX = "/api/shared/"


def _apply_contract_response_codes(schema: dict) -> None:
    """Limit documented response codes to the gateway and handler contract."""
    for path, methods in _OPENAPI_RESPONSE_CODES.items():
        path_item = schema.get("paths", {}).get(path)
        if not path_item:
            continue

        for method, allowed_codes in methods.items():
            operation = path_item.get(method)
            if not operation:
                continue

            responses = operation.setdefault("responses", {})
            for status_code in list(responses.keys()):
                if status_code not in allowed_codes:
                    responses.pop(status_code, None)

            for status_code in sorted(allowed_codes):
                responses.setdefault(status_code, {"description": "See API contract"})


def create_app() -> FastAPI:
    app = FastAPI(title="Alex Library API", version="0.4.0")
    app.state.store = InMemoryStore()
    app.add_middleware(AuthorizationGatewayMiddleware)

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.payload.model_dump(mode="json", exclude_none=True),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Malformed probes against share links look exactly like unknown tokens.
        if request.url.path.startswith(_SHARED_API_PREFIX):
            payload = NoLeakNotFoundError(code="RESOURCE_NOT_FOUND", message=NOT_FOUND_MESSAGE)
            return JSONResponse(status_code=404, content=payload.model_dump())

        return await request_validation_exception_handler(request, exc)

    api_prefix = "/api"
    app.include_router(shared_router, prefix=api_prefix)
    app.include_router(collections_router, prefix=api_prefix)
    app.include_router(library_router, prefix=api_prefix)
    app.include_router(admin_router, prefix=api_prefix)
    app.include_router(electron_router, prefix=api_prefix)
    app.include_router(auth_router, prefix=api_prefix)
    app.include_router(pages_router)

    def custom_openapi() -> dict:
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
        )
        _apply_contract_response_codes(schema)
        app.openapi_schema = schema
        return app.openapi_schema

    app.openapi = custom_openapi

    return app


app = create_app()
