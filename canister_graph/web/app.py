"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI, Request, Response

from canister_graph import __version__
from canister_graph.web.api import router


def create_app() -> FastAPI:
    app = FastAPI(title="canister-graph", version=__version__)

    @app.middleware("http")
    async def no_cache_api(request: Request, call_next):
        response: Response = await call_next(request)
        if request.url.path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-cache"
        return response

    app.include_router(router)
    return app


app = create_app()
