# =============================================================================
# app/routers/customers.py - Customer Endpoints
# =============================================================================
# Customer records for admins and salespeople. Deleting is admin only.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from app.dependencies import AdminUser, PaginationDep, SalesUser
from core.models.customer import CustomerCreate, CustomerUpdate
from core.services.customer_service import CustomerService

router = APIRouter()

CustomerId = Annotated[UUID, Path(description="Customer UUID")]


# =============================================================================
# Endpoints
# =============================================================================

@router.get("")
async def list_customers(
    user: SalesUser,
    pagination: PaginationDep,
    search: Annotated[str | None, Query(description="Match name, email or company")] = None,
):
    """List customers, newest first."""
    customers, total = CustomerService.list_customers(
        search=search,
        page=pagination.page,
        limit=pagination.limit,
    )
    return {"customers": customers, "pagination": pagination.block(total)}


@router.get("/{customer_id}")
async def get_customer(customer_id: CustomerId, user: SalesUser):
    return CustomerService.get_customer(customer_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_customer(request: CustomerCreate, user: SalesUser):
    """
    Create a customer.

    Email must be unique (409 CUSTOMER_EMAIL_EXISTS).
    """
    return CustomerService.create_customer(request)


@router.patch("/{customer_id}")
async def update_customer(customer_id: CustomerId, request: CustomerUpdate, user: SalesUser):
    return CustomerService.update_customer(customer_id, request)


@router.delete("/{customer_id}")
async def delete_customer(customer_id: CustomerId, user: AdminUser):
    CustomerService.delete_customer(customer_id)
    return {"success": True, "message": "Customer deleted successfully"}
