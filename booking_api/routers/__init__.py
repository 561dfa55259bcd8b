# Routers package
from . import auth_router
from . import appointments_router
from . import doctors_router

__all__ = [
    "auth_router",
    "appointments_router",
    "doctors_router",
]
