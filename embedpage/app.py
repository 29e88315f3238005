"""FastAPI app serving the resolved embed."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, ConfigDict, Field

from embedengine.config import ConfigStore, Settings
from embedengine.exceptions import ConfigError, EmbedResolverError
from embedengine.logger import configure_logging, get_logger
from embedengine.service import EmbedService

log = get_logger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


class UpdateUrlRequest(BaseModel):
    """Body of ``POST /update-url``."""

    model_config = ConfigDict(populate_by_name=True)

    new_url: str | None = Field(default=None, alias="newUrl")


def create_app(
    settings: Settings | None = None,
    service: EmbedService | None = None,
    config_store: ConfigStore | None = None,
) -> FastAPI:
    """Build the app around explicit service and config objects."""
    settings = settings or Settings.from_env()

    app = FastAPI(title="Embed Player", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.service = service or EmbedService.from_settings(settings)
    app.state.config_store = config_store or ConfigStore(settings.config_file)

    # --- HTML Routes ---

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request) -> HTMLResponse:
        """Player page embedding the resolved frame."""
        store: ConfigStore = request.app.state.config_store
        embed_service: EmbedService = request.app.state.service
        try:
            source_url = store.source_url()
            if not source_url:
                raise ConfigError("Source URL is not configured")
            iframe_url = await embed_service.get_locator(source_url)
        except EmbedResolverError as exc:
            log.error("player_page_failed", error=str(exc))
            return templates.TemplateResponse(
                request,
                "error.html",
                {"message": str(exc)},
                status_code=500,
            )
        return templates.TemplateResponse(
            request,
            "index.html",
            {"iframe_url": iframe_url, "source_url": source_url},
        )

    # --- API Routes ---

    @app.get("/current-url")
    async def current_url(request: Request) -> dict[str, str]:
        """Currently configured source URL."""
        store: ConfigStore = request.app.state.config_store
        return {"url": store.source_url()}

    @app.post("/update-url", response_model=None)
    async def update_url(
        request: Request, body: UpdateUrlRequest
    ) -> dict[str, Any] | JSONResponse:
        """Replace the configured source URL."""
        prefix = request.app.state.settings.source_url_prefix
        new_url = body.new_url
        if not new_url or not new_url.startswith(prefix):
            return JSONResponse({"error": "Invalid URL format"}, status_code=400)

        store: ConfigStore = request.app.state.config_store
        store.set_source_url(new_url)
        log.info("source_url_updated", url=new_url)
        return {"message": "URL updated", "url": new_url}

    @app.exception_handler(EmbedResolverError)
    async def embed_error_handler(
        request: Request, exc: EmbedResolverError
    ) -> JSONResponse:
        log.error("request_failed", path=request.url.path, error=str(exc))
        return JSONResponse({"error": str(exc)}, status_code=500)

    return app


def main() -> None:
    """Run the player server."""
    settings = Settings.from_env()
    configure_logging(settings.log_level, settings.log_format)
    app = create_app(settings)
    log.info("server_starting", host=settings.host, port=settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
