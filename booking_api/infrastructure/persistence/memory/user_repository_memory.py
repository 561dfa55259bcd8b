import threading
import uuid
from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Optional

from ....application.ports.pagination import Page, offset_for
from ....application.ports.user_repo import UserDto, UserRepository, UserRole
from ....exceptions import EmailTakenError
from ....utils import utcnow


class InMemoryUserRepository(UserRepository):
    def __init__(self, clock: Callable = utcnow) -> None:
        self._users: Dict[str, UserDto] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        with self._lock:
            user = self._users.get(user_id)
            return replace(user) if user else None

    def get_many(self, user_ids: Iterable[str]) -> Dict[str, UserDto]:
        with self._lock:
            return {uid: replace(self._users[uid]) for uid in set(user_ids) if uid in self._users}

    def get_by_email(self, email: str) -> Optional[UserDto]:
        email = email.strip().lower()
        with self._lock:
            return next((replace(u) for u in self._users.values() if u.email == email), None)

    def get_by_email_and_role(self, email: str, role: UserRole) -> Optional[UserDto]:
        user = self.get_by_email(email)
        return user if user and user.role == role else None

    def create(self, name: str, email: str, password_hash: str, role: UserRole, specialization: Optional[str], photo_url: Optional[str]) -> UserDto:
        email = email.strip().lower()
        with self._lock:
            if any(u.email == email for u in self._users.values()):
                raise EmailTakenError(email)
            user = UserDto(
                id=str(uuid.uuid4()),
                name=name,
                email=email,
                password_hash=password_hash,
                role=role,
                specialization=specialization if role == UserRole.DOCTOR else None,
                photo_url=photo_url,
                created_at=self._clock(),
            )
            self._users[user.id] = user
            return replace(user)

    def find_doctors(self, search: Optional[str], specialization: Optional[str], page: int, limit: int) -> Page[UserDto]:
        with self._lock:
            doctors: List[UserDto] = [replace(u) for u in self._users.values() if u.role == UserRole.DOCTOR]
        if search:
            needle = search.lower()
            doctors = [
                d for d in doctors
                if needle in d.name.lower() or needle in (d.specialization or "").lower()
            ]
        if specialization:
            doctors = [d for d in doctors if d.specialization == specialization]
        doctors.sort(key=lambda d: (d.created_at, d.id), reverse=True)
        start = offset_for(page, limit)
        return Page(items=doctors[start:start + limit], page=page, limit=limit, total=len(doctors))
