"""DuctForge API: FastAPI application entry point."""

import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ductservice.routes import design, library
from ductservice.middleware.rate_limit import RateLimitMiddleware

load_dotenv()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    # Reference tables are read-only and shared by every request
    from ductengine.catalog import default_catalog
    app.state.catalog = default_catalog()
    yield


app = FastAPI(
    title="DuctForge API",
    description="HVAC duct network sizing and pressure-loss calculations",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS: configured frontend plus localhost
_frontend_url = os.getenv("FRONTEND_URL")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[_frontend_url] if _frontend_url else [],
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RateLimitMiddleware, requests_per_minute=int(os.getenv("DUCT_API_RATE_LIMIT", "60")))

app.include_router(design.router, prefix="/api", tags=["Design"])
app.include_router(library.router, prefix="/api", tags=["Library"])


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "ductforge-api"}
