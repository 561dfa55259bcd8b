from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, Optional, Protocol

from .pagination import Page


class UserRole(str, Enum):
    DOCTOR = "DOCTOR"
    PATIENT = "PATIENT"


@dataclass
class UserDto:
    id: str
    name: str
    email: str
    password_hash: str
    role: UserRole
    specialization: Optional[str]
    photo_url: Optional[str]
    created_at: datetime

    @property
    def is_doctor(self) -> bool:
        return self.role == UserRole.DOCTOR

    @property
    def is_patient(self) -> bool:
        return self.role == UserRole.PATIENT

    def profile(self) -> dict:
        """Public fields, never the password hash."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "specialization": self.specialization,
            "photo_url": self.photo_url,
            "createdAt": self.created_at.isoformat(),
        }


class UserRepository(Protocol):
    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        ...

    def get_many(self, user_ids: Iterable[str]) -> Dict[str, UserDto]:
        ...

    def get_by_email(self, email: str) -> Optional[UserDto]:
        ...

    def get_by_email_and_role(self, email: str, role: UserRole) -> Optional[UserDto]:
        ...

    def create(self, name: str, email: str, password_hash: str, role: UserRole, specialization: Optional[str], photo_url: Optional[str]) -> UserDto:
        """Raises EmailTakenError when the email is already stored."""
        ...

    def find_doctors(self, search: Optional[str], specialization: Optional[str], page: int, limit: int) -> Page[UserDto]:
        ...
