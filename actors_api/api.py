"""
FastAPI application for the actors API.

The app factory wires the store, scraper, seeder and service explicitly, runs
seeding inside the lifespan before any request is served, and renders every
error as the JSON envelope {"error": ..., "statusCode": ...}.
"""

from contextlib import asynccontextmanager
from typing import Annotated
from typing import Dict
from typing import Optional

import structlog
from fastapi import APIRouter
from fastapi import Depends
from fastapi import FastAPI
from fastapi import Path
from fastapi import Query
from fastapi import Request
from fastapi import Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from actors_api.auth import require_api_key
from actors_api.database import ActorRepository
from actors_api.database import ActorStore
from actors_api.errors import ActorsApiError
from actors_api.errors import ErrorKind
from actors_api.errors import ValidationError
from actors_api.errors import error_for_kind
from actors_api.models import ActorCreate
from actors_api.models import ActorDetail
from actors_api.models import ActorFilter
from actors_api.models import ActorSummary
from actors_api.models import ActorUpdate
from actors_api.models import INT32_MAX
from actors_api.models import INT32_MIN
from actors_api.models import PagedResult
from actors_api.models import ServiceResult
from actors_api.scraper.base import ScraperProvider
from actors_api.scraper.http_client import HttpClient
from actors_api.scraper.imdb_scraper import ImdbScraper
from actors_api.seeder import DataSeeder
from actors_api.services import ActorService
from actors_api.settings import Settings
from actors_api.settings import get_settings

logger = structlog.get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "An internal server error occurred."

STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.UPSTREAM: 500,
    ErrorKind.INTERNAL: 500,
}

MAX_PAGE_SIZE = 100

ActorId = Annotated[int, Path(ge=INT32_MIN, le=INT32_MAX)]


def get_service(request: Request) -> ActorService:
    return request.app.state.service


def unwrap(result: ServiceResult):
    """Return the value of a successful result, or raise its error kind."""
    if not result.ok:
        raise error_for_kind(result.error_kind, result.message)
    return result.value


router = APIRouter(
    prefix="/api/actors",
    tags=["actors"],
    dependencies=[Depends(require_api_key)],
)


@router.get("", response_model=PagedResult[ActorSummary])
async def list_actors(
    name: Optional[str] = Query(default=None, description="Case-sensitive partial name match"),
    min_rank: Optional[int] = Query(
        default=None, alias="minRank", ge=INT32_MIN, le=INT32_MAX, description="Minimum rank (inclusive)"
    ),
    max_rank: Optional[int] = Query(
        default=None, alias="maxRank", ge=INT32_MIN, le=INT32_MAX, description="Maximum rank (inclusive)"
    ),
    page_number: int = Query(default=1, alias="pageNumber", le=INT32_MAX),
    page_size: int = Query(default=10, alias="pageSize", le=INT32_MAX),
    service: ActorService = Depends(get_service),
):
    """Paginated list of actors (id and name only)."""
    if page_number < 1:
        raise ValidationError("Page number must be greater than 0.")
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        raise ValidationError(f"Page size must be between 1 and {MAX_PAGE_SIZE}.")

    actor_filter = ActorFilter(
        name=name,
        min_rank=min_rank,
        max_rank=max_rank,
        page_number=page_number,
        page_size=page_size,
    )
    return await service.list(actor_filter)


@router.get("/{actor_id}", response_model=ActorDetail, name="get_actor")
async def get_actor(actor_id: ActorId, service: ActorService = Depends(get_service)):
    return unwrap(await service.get_by_id(actor_id))


@router.post("", response_model=ActorDetail, status_code=201)
async def create_actor(
    body: ActorCreate,
    request: Request,
    response: Response,
    service: ActorService = Depends(get_service),
):
    created = unwrap(await service.create(body))
    response.headers["Location"] = str(request.url_for("get_actor", actor_id=created.id))
    return created


@router.put("/{actor_id}", response_model=ActorDetail)
async def update_actor(
    actor_id: ActorId,
    body: ActorUpdate,
    service: ActorService = Depends(get_service),
):
    return unwrap(await service.update(actor_id, body))


@router.delete("/{actor_id}", status_code=204)
async def delete_actor(actor_id: ActorId, service: ActorService = Depends(get_service)):
    unwrap(await service.delete(actor_id))
    return Response(status_code=204)


def error_response(
    status_code: int, message: str, headers: Optional[Dict[str, str]] = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "statusCode": status_code},
        headers=headers,
    )


async def handle_api_error(request: Request, exc: ActorsApiError) -> JSONResponse:
    status_code = STATUS_BY_KIND.get(exc.kind, 500)
    if status_code == 500:
        logger.error("internal_error", path=request.url.path, error=str(exc))
        return error_response(500, INTERNAL_ERROR_MESSAGE)

    headers = {"WWW-Authenticate": "Bearer"} if exc.kind is ErrorKind.UNAUTHENTICATED else None
    return error_response(status_code, exc.message, headers)


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        details.append(f"{location}: {error.get('msg', 'invalid value')}")
    return error_response(400, "; ".join(details) or "Invalid request.")


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path)
    return error_response(500, INTERNAL_ERROR_MESSAGE)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[ActorRepository] = None,
    scraper: Optional[ScraperProvider] = None,
) -> FastAPI:
    """
    Build the application with explicitly passed collaborators.

    Args:
        settings: Configuration; defaults to the global settings
        store: Actor store; defaults to a fresh in-memory ActorStore
        scraper: Seeding provider; defaults to the IMDb scraper

    Returns:
        Configured FastAPI application. Startup fails if seeding cannot
        fetch or parse the provider page.
    """
    settings = settings or get_settings()
    store = store or ActorStore(settings.db_path)
    scraper = scraper or ImdbScraper(
        HttpClient(settings),
        source_url=settings.source_url,
        provider_name=settings.provider_name,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await store.initialize()
        try:
            await DataSeeder(store, scraper).seed()
        except Exception:
            logger.exception("startup_seeding_failed", provider=scraper.provider_name)
            await store.close()
            raise
        try:
            yield
        finally:
            await store.close()

    production = settings.is_production
    app = FastAPI(
        title="Actors API",
        description="Ranked actors scraped from a public list, with CRUD and filtering.",
        version="1.0.0",
        lifespan=lifespan,
        docs_url=None if production else "/docs",
        redoc_url=None,
        openapi_url=None if production else "/openapi.json",
    )
    app.state.settings = settings
    app.state.store = store
    app.state.service = ActorService(store)

    app.include_router(router)
    app.add_exception_handler(ActorsApiError, handle_api_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)
    return app
