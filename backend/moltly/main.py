from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from moltly.api.routers import account, auth, breeding, export, health, imports, logs, migrate, research, upload
from moltly.config import log_level, uploads_dir
from moltly.db import init_db
from moltly.errors import register_error_handlers
from moltly.logging_config import configure_logging
from moltly.services.auth.rate_limit import InMemoryLoginAttemptStore, LoginRateLimiter

app = FastAPI(title="Moltly API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# single-process default; swap the store for shared storage when running several workers
app.state.login_limiter = LoginRateLimiter(InMemoryLoginAttemptStore())


@app.get("/health")
def liveness():
    return {"ok": True}


# create the schema on first start
@app.on_event("startup")
def on_startup():
    configure_logging(log_level())
    init_db()

app.include_router(auth.router,     prefix="/api/auth",            tags=["auth"])
app.include_router(logs.router,     prefix="/api/logs",            tags=["logs"])
app.include_router(health.router,   prefix="/api/health",          tags=["health"])
app.include_router(breeding.router, prefix="/api/breeding",        tags=["breeding"])
app.include_router(research.router, prefix="/api/research",        tags=["research"])
app.include_router(export.router,   prefix="/api/export",          tags=["export"])
app.include_router(imports.router,  prefix="/api/import",          tags=["import"])
app.include_router(upload.router,   prefix="/api/upload",          tags=["upload"])
app.include_router(account.router,  prefix="/api/account",         tags=["account"])
app.include_router(migrate.router,  prefix="/api/migrate-uploads", tags=["storage"])

# filesystem attachments are served from /uploads
_uploads = uploads_dir()
_uploads.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=str(_uploads)), name="uploads")
