"""
Sales Ledger Analytics API - Main Application.

FastAPI application with CORS enabled for frontend communication.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
from api import __version__
from logging_config import configure_logging

configure_logging(config.LOG_LEVEL)

# Create FastAPI application
app = FastAPI(
    title="Sales Ledger Analytics API",
    description="Read-only analytics over the retail sales ledger: KPIs, payment breakdowns, and customer loyalty",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS - Allow all origins for development
# TODO: Restrict origins once the dashboard's production domain is fixed
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint.

    Returns the API status and version.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "service": "sales-ledger-analytics-api"
    }


@app.get("/", tags=["Root"])
def root():
    """
    Root endpoint with API information.
    """
    return {
        "message": "Sales Ledger Analytics API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


# Import and include routers
from api.routers import cash_close, customers, sales

app.include_router(sales.router, prefix="/api/v1", tags=["Sales"])
app.include_router(customers.router, prefix="/api/v1", tags=["Customers"])
app.include_router(cash_close.router, prefix="/api/v1", tags=["Cash Close"])
