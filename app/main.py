from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from app.config import get_settings
from app.database import init_db, AsyncSessionLocal
from app.core.exceptions import CitizenServicesError
from app.core.notifier import dispatcher
import logging

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    # Startup
    logger.info(f"Starting citizen services API ({settings.ENVIRONMENT})")
    await init_db()
    yield
    # Shutdown: let queued complaint notifications finish
    await dispatcher.drain()


app = FastAPI(
    title="Municipal Citizen Services API",
    description="Tax records, payment status, complaints and municipal service catalog",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

cors_origins = settings.cors_origins
if settings.ENVIRONMENT == "development":
    logger.info(f"CORS allowed origins: {cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Add Gzip compression
app.add_middleware(GZipMiddleware, minimum_size=1000)


@app.exception_handler(CitizenServicesError)
async def citizen_services_error_handler(request: Request, exc: CitizenServicesError):
    """Domain errors become {"detail": ...} with the error's status code"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Municipal Citizen Services API",
        "version": "1.0.0",
        "docs": "/docs",
        "status": "operational"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT
    }


# Import and include routers
from app.api.v1 import auth, profile, tax, admin, complaints, public
from app.websocket.manager import manager
from app.middleware.auth import get_user_from_token
from app.core.access_gate import AccessGate

app.include_router(auth.router, prefix="/api/v1/auth", tags=["Authentication"])
app.include_router(profile.router, prefix="/api/v1/profile", tags=["Profile"])
app.include_router(tax.router, prefix="/api/v1/tax", tags=["Tax Records"])
app.include_router(complaints.router, prefix="/api/v1/complaints", tags=["Complaints"])
app.include_router(admin.router, prefix="/api/v1/admin", tags=["Admin Dashboard"])
app.include_router(public.router, prefix="/api/v1/public", tags=["Public"])


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, token: str = ""):
    """Real-time dashboard updates; admins also receive complaint and ledger events"""
    async with AsyncSessionLocal() as db:
        user = await get_user_from_token(token, db)
        is_admin = await AccessGate(db).is_admin(user.id) if user else False

    if user is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await manager.connect(websocket, user_id=user.id, is_admin=is_admin)
    try:
        while True:
            # Keep connection alive
            await websocket.receive_text()
            await websocket.send_json({"type": "pong", "message": "Connection active"})
    except WebSocketDisconnect:
        manager.disconnect(websocket, user_id=user.id)
