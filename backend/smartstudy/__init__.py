from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from smartstudy.config import settings
from smartstudy.db import init_all_databases


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_all_databases(settings.smartstudy_data_dir)
    from smartstudy.services.session_registry import reset

    # Reload the workspace from whichever store this process just opened
    reset()
    yield


def create_app() -> FastAPI:
    application = FastAPI(
        title="SmartStudy Backend", version="0.1.0", lifespan=lifespan
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from smartstudy.routers import chat, documents, health, study, upload

    application.include_router(health.router)
    application.include_router(
        documents.router, prefix="/documents", tags=["documents"]
    )
    application.include_router(
        upload.router, prefix="/documents", tags=["documents"]
    )
    application.include_router(
        study.router, prefix="/study", tags=["study"]
    )
    application.include_router(
        chat.router, prefix="/api", tags=["chat"]
    )

    return application


app = create_app()
