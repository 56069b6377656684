# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - customers.py: Customer records
# - catalog.py: Catalog items and SKU validation
# - catalog_images.py: Catalog image variant upload/removal
# - catalog_mockups.py: Design mockups of catalog items
# - orders.py: Orders and line items
# - order_images.py: Production progress photos
# - audit.py: Order audit trail
# - invitations.py: User invitations
# - users.py: User accounts
# - tasks.py: Design/production tasks and the manufacturing queue
# - stats.py: Dashboard statistics
#
# Each router is mounted in main.py with a URL prefix under /api.
# =============================================================================

from . import health
from . import customers
from . import catalog
from . import catalog_images
from . import catalog_mockups
from . import orders
from . import order_images
from . import audit
from . import invitations
from . import users
from . import tasks
from . import stats

__all__ = [
    "health",
    "customers",
    "catalog",
    "catalog_images",
    "catalog_mockups",
    "orders",
    "order_images",
    "audit",
    "invitations",
    "users",
    "tasks",
    "stats",
]
