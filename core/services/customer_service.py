# =============================================================================
# core/services/customer_service.py - Customer Business Logic
# =============================================================================
# Handles customer CRUD. Email addresses are unique per customer.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import ConflictError, CustomerNotFoundError, DatabaseError
from core.models.customer import CustomerCreate, CustomerUpdate
from lib.supabase_client import SupabaseClient, is_unique_violation
from lib.utils import normalize_uuid, search_filter, utc_now_iso

logger = logging.getLogger(__name__)

TABLE = "customers"
SEARCH_COLUMNS = ["first_name", "last_name", "email", "company"]


def _email_conflict(email: str) -> ConflictError:
    return ConflictError(
        message=f"A customer with this email already exists: {email}",
        code="CUSTOMER_EMAIL_EXISTS",
        suggestion="Search for the existing customer instead of creating a new one",
        details={"email": email},
    )


class CustomerService:
    """Service for customer operations."""

    @staticmethod
    def list_customers(
        search: str | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List customers, newest first.

        Returns:
            Tuple of (customers, total matching count)
        """
        client = SupabaseClient.get_client()
        offset = (page - 1) * limit

        try:
            query = client.table(TABLE).select("*", count="exact")
            if search:
                query = query.or_(search_filter(SEARCH_COLUMNS, search))
            response = (
                query.order("created_at", desc=True)
                .range(offset, offset + limit - 1)
                .execute()
            )
            customers = response.data or []
            total = response.count if response.count is not None else len(customers)
            return customers, total

        except Exception as e:
            logger.error(f"Failed to list customers: {e}")
            raise DatabaseError("list customers", str(e))

    @staticmethod
    def get_customer(customer_id: str | UUID) -> dict[str, Any]:
        customer = SupabaseClient.fetch_by_id(TABLE, customer_id)
        if not customer:
            raise CustomerNotFoundError(str(customer_id))
        return customer

    @staticmethod
    def find_by_email(email: str) -> dict[str, Any] | None:
        return SupabaseClient.fetch_one_by(TABLE, "email", email.strip().lower())

    @staticmethod
    def customer_ids_for_user(user_id: str | UUID) -> list[str]:
        """Customer records linked to a login (used to scope customer access)."""
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table(TABLE)
                .select("id")
                .eq("user_id", normalize_uuid(user_id))
                .execute()
            )
            return [str(row["id"]) for row in response.data or []]

        except Exception as e:
            logger.error(f"Failed to resolve customers for user {user_id}: {e}")
            raise DatabaseError("resolve customer records", str(e))

    @staticmethod
    def create_customer(payload: CustomerCreate) -> dict[str, Any]:
        """
        Create a customer.

        Raises:
            ConflictError: If the email is already registered
        """
        data = payload.model_dump(mode="json")
        data["email"] = data["email"].strip().lower()

        if CustomerService.find_by_email(data["email"]):
            raise _email_conflict(data["email"])

        client = SupabaseClient.get_client()
        try:
            response = client.table(TABLE).insert(data).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise _email_conflict(data["email"])
            logger.error(f"Failed to create customer: {e}")
            raise DatabaseError("create customer", str(e))

        if not response.data:
            raise DatabaseError("create customer", "Insert returned no data")

        customer = response.data[0]
        logger.info(f"Created customer: {customer['id']}")
        return customer

    @staticmethod
    def update_customer(customer_id: str | UUID, payload: CustomerUpdate) -> dict[str, Any]:
        """
        Partially update a customer.

        Raises:
            CustomerNotFoundError: If the customer doesn't exist
            ConflictError: If the new email belongs to another customer
        """
        customer_id_str = normalize_uuid(customer_id)
        CustomerService.get_customer(customer_id_str)

        changes = payload.model_dump(mode="json", exclude_unset=True)
        if changes.get("email"):
            changes["email"] = changes["email"].strip().lower()
            existing = CustomerService.find_by_email(changes["email"])
            if existing and str(existing["id"]) != customer_id_str:
                raise _email_conflict(changes["email"])
        changes["updated_at"] = utc_now_iso()

        client = SupabaseClient.get_client()
        try:
            response = client.table(TABLE).update(changes).eq("id", customer_id_str).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise _email_conflict(changes.get("email", ""))
            logger.error(f"Failed to update customer {customer_id_str}: {e}")
            raise DatabaseError("update customer", str(e))

        if not response.data:
            raise CustomerNotFoundError(customer_id_str)

        logger.info(f"Updated customer {customer_id_str}")
        return response.data[0]

    @staticmethod
    def delete_customer(customer_id: str | UUID) -> None:
        customer_id_str = normalize_uuid(customer_id)
        client = SupabaseClient.get_client()

        try:
            response = client.table(TABLE).delete().eq("id", customer_id_str).execute()
        except Exception as e:
            logger.error(f"Failed to delete customer {customer_id_str}: {e}")
            raise DatabaseError("delete customer", str(e))

        if not response.data:
            raise CustomerNotFoundError(customer_id_str)
        logger.info(f"Deleted customer: {customer_id_str}")
