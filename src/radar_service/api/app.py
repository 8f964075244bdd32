"""FastAPI application factory."""

import logging
import time
from collections.abc import Awaitable, Callable

from fastapi import APIRouter, FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from radar_service.api.models import (
    CreateUserRequest,
    LocationResponse,
    NearbyUsersResponse,
    UpdateLocationRequest,
    UserResponse,
)
from radar_service.app_logging import configure_logging
from radar_service.config import parse_allowed_origins
from radar_service.containers import AppContainer
from radar_service.domain.errors import (
    ConflictError,
    NotFoundError,
    RadarError,
    StorageError,
    ValidationError,
)

_ERROR_STATUS: dict[type[RadarError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    app = FastAPI(title="Radar Service")
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_allowed_origins(container.settings.allowed_origins),
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
        allow_credentials=True,
    )

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = (time.perf_counter() - start) * 1000
        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"
        client = request.client.host if request.client else "-"
        logger.info(
            "[%s] %d | %.2fms | %s | %s",
            request.method,
            response.status_code,
            latency_ms,
            client,
            path,
        )
        return response

    @app.exception_handler(RadarError)
    async def handle_radar_error(_request: Request, exc: RadarError) -> JSONResponse:
        status_code = _ERROR_STATUS.get(
            type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        return JSONResponse(status_code=status_code, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": _format_validation_errors(exc)},
        )

    app.include_router(_build_router())
    return app


def _build_router() -> APIRouter:
    router = APIRouter(prefix="/api/v1")

    @router.get("/health")
    async def health(request: Request) -> JSONResponse:
        """Report whether the backing store is reachable."""
        container: AppContainer = request.app.state.container
        try:
            container.user_service.ping()
        except StorageError:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={
                    "status": "unhealthy",
                    "error": "database connection failed",
                },
            )
        return JSONResponse(content={"status": "healthy"})

    @router.post("/users", status_code=status.HTTP_201_CREATED)
    async def create_user(payload: CreateUserRequest, request: Request) -> UserResponse:
        """Register a user."""
        container: AppContainer = request.app.state.container
        user = container.user_service.create_user(str(payload.email))
        return UserResponse.from_record(user)

    @router.get("/users")
    async def list_users(request: Request) -> list[UserResponse]:
        container: AppContainer = request.app.state.container
        return [
            UserResponse.from_record(user)
            for user in container.user_service.list_users()
        ]

    @router.get("/users/{user_id}")
    async def get_user(user_id: int, request: Request) -> UserResponse:
        container: AppContainer = request.app.state.container
        return UserResponse.from_record(container.user_service.get_user(user_id))

    @router.delete("/users/{user_id}")
    async def delete_user(user_id: int, request: Request) -> dict[str, str]:
        """Delete a user together with its location."""
        container: AppContainer = request.app.state.container
        container.user_service.delete_user(user_id)
        return {"message": "user deleted successfully"}

    @router.post("/radar/location")
    async def update_location(
        payload: UpdateLocationRequest, request: Request
    ) -> LocationResponse:
        """Create or replace the caller's current location."""
        container: AppContainer = request.app.state.container
        record = container.radar_service.upsert_location(
            user_id=payload.user_id,
            latitude=payload.latitude,
            longitude=payload.longitude,
            is_active=payload.is_active,
        )
        return LocationResponse.from_record(record)

    @router.get("/radar/nearby")
    async def nearby_users(
        latitude: float, longitude: float, radius: float, request: Request
    ) -> NearbyUsersResponse:
        """Return active users within ``radius`` kilometers, nearest first."""
        container: AppContainer = request.app.state.container
        result = container.radar_service.find_active_within(
            latitude, longitude, radius
        )
        return NearbyUsersResponse.from_result(result)

    return router


def _format_validation_errors(exc: RequestValidationError) -> str:
    """Flatten pydantic errors into a single message."""
    parts = []
    for error in exc.errors():
        location = ".".join(
            str(part) for part in error.get("loc", ()) if part not in {"body", "query"}
        )
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "invalid request"
