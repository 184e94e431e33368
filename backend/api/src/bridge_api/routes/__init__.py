"""API routes package.

Routers are organized by domain:

- customers: Customer creation
- setup_intents: Card SetupIntent creation
- webhooks: Stripe event delivery
- config: Frontend configuration

All routers are registered at the root path in main.py.
"""

from bridge_api.routes.config import router as config_router
from bridge_api.routes.customers import router as customers_router
from bridge_api.routes.setup_intents import router as setup_intents_router
from bridge_api.routes.webhooks import router as webhooks_router

__all__ = [
    "config_router",
    "customers_router",
    "setup_intents_router",
    "webhooks_router",
]
