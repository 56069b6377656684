# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .audit_service import AuditService
from .catalog_image_service import CatalogImageService, ImageUpload
from .catalog_service import CatalogService
from .customer_service import CustomerService
from .image_service import ImageService
from .invitation_service import InvitationService
from .mockup_service import MockupService
from .order_image_service import OrderImageService
from .order_service import OrderService
from .stats_service import StatsService
from .storage_service import StorageService
from .task_service import TaskService
from .user_service import UserService

__all__ = [
    "AuditService",
    "CatalogImageService",
    "CatalogService",
    "CustomerService",
    "ImageService",
    "ImageUpload",
    "InvitationService",
    "MockupService",
    "OrderImageService",
    "OrderService",
    "StatsService",
    "StorageService",
    "TaskService",
    "UserService",
]
