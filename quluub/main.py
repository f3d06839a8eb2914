# quluub/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from quluub.api import (
    admin,
    auth,
    bank,
    complaints,
    connection_requests,
    counselors,
    messages,
    notifications,
    payment,
    reviews,
    sessions,
    users,
    video,
    wallet,
)
from quluub.config import settings
from quluub.database import Base, engine

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    Base.metadata.create_all(bind=engine, checkfirst=True)
    yield
    logger.info("Application shutting down...")


# Initialize FastAPI app
app = FastAPI(title="Quluub API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error on %s %s: %r", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routers
app.include_router(auth.router)                 # /auth/*
app.include_router(users.router)                # /users/*
app.include_router(counselors.router)           # /counselors/*
app.include_router(sessions.router)             # /sessions/*
app.include_router(reviews.router)              # /reviews/*
app.include_router(connection_requests.router)  # /requests/*
app.include_router(wallet.router)               # /wallet/*
app.include_router(bank.router)                 # /bank/*
app.include_router(payment.router)              # /payment/*
app.include_router(video.router)                # /video/*
app.include_router(messages.router)             # /messages/*
app.include_router(complaints.router)           # /complaints/*
app.include_router(notifications.router)        # /notifications/*
app.include_router(admin.router)                # /admin/*


@app.get("/health")
def health_check():
    return {
        "status": "healthy",
        "message": "Quluub API is running",
        "version": "1.0.0",
    }


@app.get("/debug/routes")
def list_routes():
    """List all registered routes for debugging."""
    routes = []
    for route in app.routes:
        if hasattr(route, "methods"):
            routes.append({
                "path": route.path,
                "methods": list(route.methods),
                "name": route.name,
            })
    return {"routes": routes}
