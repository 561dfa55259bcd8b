from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from ....utils import utcnow
from .appointments_repository_memory import InMemoryAppointmentsRepository
from .user_repository_memory import InMemoryUserRepository


@dataclass
class InMemoryStore:
    """Both in-memory repositories, owned by one application instance."""

    clock: Callable[[], datetime] = utcnow
    users: InMemoryUserRepository = field(init=False)
    appointments: InMemoryAppointmentsRepository = field(init=False)

    def __post_init__(self):
        self.users = InMemoryUserRepository(clock=self.clock)
        self.appointments = InMemoryAppointmentsRepository(clock=self.clock)


__all__ = ["InMemoryStore", "InMemoryUserRepository", "InMemoryAppointmentsRepository"]
