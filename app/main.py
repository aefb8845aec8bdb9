"""FastAPI application entry point.

Staff Records Service - HR intake and management of staff records with
photos stored in Supabase Storage and rows in the Supabase Postgres database.
"""

import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.errors import register_exception_handlers
from routers.v1 import router as v1_router
from services.change_feed import StaffChangeFeed

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
    ],
)

logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Staff Records Service",
    description="""
    HR staff record capture and management.

    ## Features

    - Public intake form with photo upload or webcam capture
    - Photos stored in Supabase Storage, records in Postgres
    - Edit, mark-exited and delete staff records
    - Excel export of all records

    ## Authentication

    Management endpoints require a Supabase access token.
    Include the token in the Authorization header:
    ```
    Authorization: Bearer <token>
    ```
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.state.change_feed = StaffChangeFeed()

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.get(
    "/health",
    tags=["Health"],
    summary="Health Check",
    description="Check if the service is running.",
)
async def health_check() -> dict:
    """Return service health status."""
    return {
        "status": "healthy",
        "service": "staff-records-service",
        "version": "1.0.0",
    }


# Include API routers
app.include_router(
    v1_router,
    prefix="/api",
)

logger.info("Staff Records Service initialized")
