from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .controller import TaskListController
from .logging_setup import setup_logging
from .routers import scene as scene_router
from .routers import tasks as tasks_router
from .scene import Scene
from .settings import Settings, get_settings
from .store import TaskStore, get_task_store

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": "Task list operations: draft, submit, toggle, reposition, delete, filter.",
    },
    {"name": "scene", "description": "Decorative background spheres."},
]


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, store: Optional[TaskStore] = None) -> FastAPI:
    """
    Build the application around a single task list controller.

    The controller loads tasks and categories on startup and drains pending
    background writes on shutdown. Pass `store` to bypass the configured backend.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        task_store = store or get_task_store(settings)
        controller = TaskListController(task_store, mobile_breakpoint=settings.mobile_breakpoint)
        app.state.controller = controller
        app.state.scene = Scene()
        logger.info("Starting with %s task store", type(task_store).__name__)
        await controller.load()
        await controller.load_categories()
        try:
            yield
        finally:
            await controller.drain()
            await task_store.aclose()

    app = FastAPI(
        title="Dark ToDo",
        description="Single-page task list backed by a hosted `tasks` table.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.settings = settings

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for request validation errors.

        Response format:
            {
                "error": "ValidationError",
                "detail": [... pydantic/fastapi error details ...],
                "message": "Request validation failed"
            }
        """
        return JSONResponse(
            status_code=422,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": jsonable_encoder(exc.errors()),
            },
        )

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {"message": "Healthy", "backend": settings.task_store_backend}

    app.include_router(tasks_router.router)
    app.include_router(scene_router.router)
    return app


app = create_app()
