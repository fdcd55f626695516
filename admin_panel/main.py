"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from admin_panel.config import PROJECT_ROOT, settings
from admin_panel.database import create_db_and_tables
from admin_panel.utils.logging import setup_logging
from admin_panel.api import auth, system
from admin_panel.api.deps import build_route_guard, get_token_codec, get_user_store
from admin_panel.api.middleware import RouteGuardMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    setup_logging()
    create_db_and_tables()
    yield


app = FastAPI(
    title="Admin Panel",
    description="Database admin dashboard with multi-step 2FA login",
    version="0.1.0",
    lifespan=lifespan,
)

# Added first so CORS wraps it and redirects still carry CORS headers
app.add_middleware(RouteGuardMiddleware, guard=build_route_guard(get_user_store(), get_token_codec()))
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(auth.router)
app.include_router(system.router)

# Serve the built frontend (must be after all API routers). Pages other than
# the auth pages only reach this handler once the route guard has let them through.
_frontend_dist = PROJECT_ROOT / "frontend" / "dist"
if _frontend_dist.exists():
    from fastapi.responses import FileResponse

    app.mount("/static", StaticFiles(directory=str(_frontend_dist / "static")), name="static-assets")

    @app.get("/{path:path}")
    async def serve_spa(path: str):
        file = _frontend_dist / path
        if file.is_file():
            return FileResponse(str(file))
        return FileResponse(str(_frontend_dist / "index.html"))
