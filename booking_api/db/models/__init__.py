# Models package (re-export table models for stable imports)
from .user import User
from .appointment import Appointment

__all__ = [
    "User",
    "Appointment",
]
