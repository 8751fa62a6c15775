import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from openai import AsyncOpenAI

from routes.realtime_ws import router as realtime_router
from routes.session_route import router as session_router
from services.session_store import SessionStore, openai_session_factory
from utils.config import load_settings
from utils.logging_config import configure_logging

BASE_DIR = Path(__file__).resolve().parent
PUBLIC_DIR = BASE_DIR / "public"

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file if present

LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - settings and logging
      - the OpenAI async client
      - the in-memory session store
    and attach them to `app.state`.
    """
    settings = load_settings()
    configure_logging(settings.log_level)
    app.state.settings = settings

    openai_api_key = os.getenv("OPENAI_API_KEY")
    if not openai_api_key:
        raise RuntimeError("OPENAI_API_KEY environment variable is not set")

    try:
        openai_client = AsyncOpenAI()
    except Exception as exc:
        raise RuntimeError("Failed to initialize OpenAI Async client") from exc

    app.state.openai_client = openai_client
    app.state.session_store = SessionStore(openai_session_factory(openai_client, settings))
    LOGGER.info(
        "Editor ready (safety model %s, edit model %s, max upload %d MB)",
        settings.safety_model,
        settings.edit_model,
        settings.max_upload_mb,
    )

    try:
        yield
    finally:
        try:
            await openai_client.close()
        except Exception as exc:
            LOGGER.warning("Failed to close OpenAI client: %s", exc)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    app = FastAPI(title="Editor del Estero", lifespan=lifespan)

    # Serve static assets from the public directory, if it exists.
    if PUBLIC_DIR.exists():
        app.mount("/public", StaticFiles(directory=PUBLIC_DIR), name="public")

    @app.get("/", include_in_schema=False)
    async def serve_index():
        """
        Serve the frontend index page from the public directory.
        """
        index_path = PUBLIC_DIR / "index.html"
        if not index_path.exists():
            raise HTTPException(status_code=404, detail="Frontend not found")
        return FileResponse(index_path)

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check reporting the OpenAI client and open sessions.
        """
        has_openai = getattr(request.app.state, "openai_client", None) is not None
        store = getattr(request.app.state, "session_store", None)
        return {
            "ok": True,
            "openai_available": has_openai,
            "sessions": len(store) if store is not None else 0,
        }

    # Register application routers
    app.include_router(session_router)
    app.include_router(realtime_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
