from contextlib import asynccontextmanager
import logging
import os

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session

import config
import schemas
from accounts import authenticate_admin, ensure_admin_account
from database import Base, SessionLocal, engine, get_db
from errors import ShareVaultError, ValidationError
from storage import get_storage

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        ensure_admin_account(db)
    finally:
        db.close()
    yield


app = FastAPI(
    title="ShareVault API",
    description="Password-protected image shares with admin and share-scoped sessions",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ─── Routers ──────────────────────────────────────────────────────────────────
from share_routes import router as share_router
from file_routes import router as file_router
app.include_router(share_router)
app.include_router(file_router)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
FRONTEND_DIR = os.path.join(BASE_DIR, "frontend")

if os.path.isdir(FRONTEND_DIR):
    app.mount("/static", StaticFiles(directory=FRONTEND_DIR), name="static")


# ─── Exception handlers ───────────────────────────────────────────────────────
@app.exception_handler(ShareVaultError)
async def sharevault_exception_handler(request: Request, exc: ShareVaultError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    reason = getattr(exc, "reason", None)
    if reason:
        logger.info(f"{request.method} {request.url.path} rejected: {reason}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Malformed bodies and missing fields share the ValidationError shape
    errors = exc.errors()
    message = ValidationError.default_message
    if errors:
        field = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
        message = f"{field}: {errors[0].get('msg')}" if field else errors[0].get("msg", message)
    return JSONResponse(status_code=ValidationError.status_code, content={"detail": message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ─── Root & Health ────────────────────────────────────────────────────────────

@app.get("/")
def serve_index():
    index_path = os.path.join(FRONTEND_DIR, "index.html")
    if not os.path.exists(index_path):
        return JSONResponse(status_code=200, content={"message": "ShareVault API is running."})
    return FileResponse(index_path)


@app.get("/health", tags=["System"])
def health(storage=Depends(get_storage)):
    return {"status": "ok", "service": "ShareVault", "version": "1.0.0", "storage": storage.get_health()}


# ─── Auth ─────────────────────────────────────────────────────────────────────

@app.post("/api/auth/login", response_model=schemas.Token, tags=["Auth"])
def login(user: schemas.AdminLogin, db: Session = Depends(get_db)):
    return {"token": authenticate_admin(db, user.username, user.password)}
