# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Installs the in-memory FakeSupabase as the Supabase client singleton
# - Overrides the authenticated user per test (as_role fixture)
# - Generates real images in memory with Pillow
# =============================================================================

import io
import os
from uuid import UUID, uuid4

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-enough-length-123")
os.environ.setdefault("CLIENT_URL", "http://localhost:5173")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from app.auth import AuthUser, get_current_user
from app.main import app
from core.models.user import Role
from lib.supabase_client import SupabaseClient
from tests.fake_supabase import FakeSupabase


# =============================================================================
# Supabase
# =============================================================================

@pytest.fixture
def fake_db(monkeypatch) -> FakeSupabase:
    """Fresh in-memory database/storage/auth for one test."""
    fake = FakeSupabase()
    monkeypatch.setattr(SupabaseClient, "_instance", fake)
    monkeypatch.setattr(SupabaseClient, "create_auth_client", classmethod(lambda cls: fake))
    return fake


# =============================================================================
# API client & auth
# =============================================================================

@pytest.fixture
def client(fake_db):
    """TestClient with unhandled errors returned as 500 responses."""
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def as_role():
    """
    Authenticate requests as a user with the given role.

    The real require_roles checks still run against this user.

    Usage:
        user = as_role(Role.DESIGNER)
        client.get("/api/orders")
    """
    def _as_role(role: Role, user_id: UUID | None = None, is_super_admin: bool = False) -> AuthUser:
        user = AuthUser(
            id=user_id or uuid4(),
            email=f"{role.value}@threadcraft.example.com",
            role=role,
            is_super_admin=is_super_admin,
        )
        app.dependency_overrides[get_current_user] = lambda: user
        return user

    yield _as_role
    app.dependency_overrides.pop(get_current_user, None)


# =============================================================================
# Seed data
# =============================================================================

@pytest.fixture
def customer(fake_db) -> dict:
    return fake_db.seed("customers", [{
        "first_name": "Jordan",
        "last_name": "Reyes",
        "email": "jordan@rivercityfc.org",
        "company": "River City FC",
        "country": "United States",
    }])[0]


@pytest.fixture
def catalog_item(fake_db) -> dict:
    return fake_db.seed("catalog_items", [{
        "name": "Pro Soccer Jersey",
        "category": "Jerseys",
        "sport": "Soccer",
        "sku": "JER-SOC-001",
        "base_price": 42.5,
        "unit_cost": 18.0,
        "status": "active",
        "image_variants": {},
        "image_url": None,
    }])[0]


@pytest.fixture
def order_with_items(fake_db, customer) -> dict:
    """An order with two line items (20 x 25.00 + 10 x 12.50 = 625.00)."""
    order = fake_db.seed("orders", [{
        "order_number": "ORD-TEST-001",
        "customer_id": customer["id"],
        "status": "draft",
        "priority": "medium",
        "total_amount": 625.0,
        "payment_status": "pending",
        "rush_order": False,
        "production_images": [],
    }])[0]
    items = fake_db.seed("order_items", [
        {"order_id": order["id"], "product_name": "Home Jersey", "quantity": 20,
         "unit_price": 25.0, "total_price": 500.0, "status": "pending"},
        {"order_id": order["id"], "product_name": "Team Socks", "quantity": 10,
         "unit_price": 12.5, "total_price": 125.0, "status": "pending"},
    ])
    return {"order": order, "items": items}


# =============================================================================
# Images
# =============================================================================

def make_image_bytes(
    fmt: str = "PNG",
    size: tuple[int, int] = (640, 480),
    color: tuple = (200, 30, 30),
    mode: str = "RGB",
) -> bytes:
    """Encode a solid-color image with Pillow."""
    image = Image.new(mode, size, color)
    output = io.BytesIO()
    image.save(output, fmt)
    return output.getvalue()


def make_noisy_jpeg(size: tuple[int, int]) -> bytes:
    """A JPEG that compresses badly, for exercising size thresholds."""
    image = Image.frombytes("RGB", size, os.urandom(size[0] * size[1] * 3))
    output = io.BytesIO()
    image.save(output, "JPEG", quality=100)
    return output.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes("PNG")
