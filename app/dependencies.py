# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection shared across routers:
# - Role-gated user dependencies (one alias per access level)
# - Pagination query parameters and the pagination response block
# =============================================================================

import math
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Query

from app.auth import AuthUser, get_current_user, require_roles
from core.models.user import Role

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


# =============================================================================
# Role Dependencies
# =============================================================================
# Admin passes every check, so it is not listed.

CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
AdminUser = Annotated[AuthUser, Depends(require_roles(Role.ADMIN))]
SalesUser = Annotated[AuthUser, Depends(require_roles(Role.SALESPERSON))]
StaffUser = Annotated[
    AuthUser,
    Depends(require_roles(Role.SALESPERSON, Role.DESIGNER, Role.MANUFACTURER)),
]
AnyRoleUser = Annotated[
    AuthUser,
    Depends(require_roles(Role.SALESPERSON, Role.DESIGNER, Role.MANUFACTURER, Role.CUSTOMER)),
]


# =============================================================================
# Pagination
# =============================================================================

@dataclass
class Pagination:
    page: int
    limit: int

    def block(self, total: int) -> dict[str, int]:
        """Pagination block returned next to list results."""
        return {
            "page": self.page,
            "limit": self.limit,
            "total": total,
            "pages": math.ceil(total / self.limit) if self.limit else 0,
        }


def get_pagination(
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE, description="Items per page")] = DEFAULT_PAGE_SIZE,
) -> Pagination:
    return Pagination(page=page, limit=limit)


PaginationDep = Annotated[Pagination, Depends(get_pagination)]
