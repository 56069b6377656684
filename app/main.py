# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the ThreadCraft API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    ThreadCraftException,
    threadcraft_exception_handler,
    validation_exception_handler,
)
from app.routers import (
    audit,
    catalog,
    catalog_images,
    catalog_mockups,
    customers,
    health,
    invitations,
    order_images,
    orders,
    stats,
    tasks,
    users,
)
from app.auth import routes as auth_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    The Supabase client is created lazily on first use, so startup only
    reports configuration.
    """
    logger.info(f"Starting ThreadCraft API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    yield

    logger.info("Shutting down ThreadCraft API")


# Create FastAPI application
app = FastAPI(
    title="ThreadCraft API",
    description="""
## Custom Apparel Order Management

ThreadCraft takes custom apparel orders from first quote to finished
production. Every endpoint expects a Supabase access token
(`Authorization: Bearer <token>`) and is gated by the caller's role.

### Roles

| Role | Access |
|------|--------|
| **admin** | Everything |
| **salesperson** | Customers, catalog, orders, tasks, stats |
| **designer** | Design tasks, order updates |
| **manufacturer** | Production tasks, manufacturing queue, production photos |
| **customer** | Their own orders (read only) |

### Typical Flow

1. **Invite staff** - `POST /api/invitations`
2. **Add a customer** - `POST /api/customers`
3. **Create an order** - `POST /api/orders` with its line items
4. **Assign work** - `POST /api/design-tasks`, `POST /api/production-tasks`
5. **Track progress** - production photos and the order audit trail
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Login and token verification"},
        {"name": "Customers", "description": "Customer records"},
        {"name": "Catalog", "description": "Product templates and SKUs"},
        {"name": "Images", "description": "Catalog image variants and production photos"},
        {"name": "Orders", "description": "Orders and line items"},
        {"name": "Audit", "description": "Order change history"},
        {"name": "Invitations", "description": "Invite new users"},
        {"name": "Users", "description": "User account administration"},
        {"name": "Tasks", "description": "Design and production tasks"},
        {"name": "Stats", "description": "Dashboard statistics"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(ThreadCraftException)
async def handle_threadcraft_exception(request: Request, exc: ThreadCraftException):
    """Handle custom ThreadCraft exceptions."""
    return await threadcraft_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(auth_routes.router, prefix="/api/auth", tags=["Auth"])
app.include_router(health.router, prefix="/api", tags=["Health"])

app.include_router(customers.router, prefix="/api/customers", tags=["Customers"])
app.include_router(catalog.router, prefix="/api/catalog", tags=["Catalog"])
app.include_router(catalog_mockups.router, prefix="/api/catalog", tags=["Images"])
app.include_router(catalog_images.router, prefix="/api/images", tags=["Images"])

app.include_router(orders.router, prefix="/api/orders", tags=["Orders"])
app.include_router(order_images.router, prefix="/api/orders", tags=["Images"])
app.include_router(audit.router, prefix="/api/audit", tags=["Audit"])

app.include_router(invitations.router, prefix="/api/invitations", tags=["Invitations"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])

app.include_router(tasks.design_router, prefix="/api/design-tasks", tags=["Tasks"])
app.include_router(tasks.production_router, prefix="/api/production-tasks", tags=["Tasks"])
app.include_router(tasks.manufacturing_router, prefix="/api/manufacturing", tags=["Tasks"])

app.include_router(stats.router, prefix="/api/stats", tags=["Stats"])


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "ThreadCraft API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/health",
    }
