"""API route handlers."""

from .contests import router as contests_router
from .admin import router as admin_router
from .standings import router as standings_router
from .precedence import router as precedence_router
