# Consolidated route imports
from .admin import router as admin_router
from .auth import router as auth_router
from .checkout import router as checkout_router
from .health import router as health_router
from .orders import router as orders_router
from .webhooks import router as webhooks_router
