from typing import Dict, Iterable, Optional
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, func, or_, select

from .....db.models import User
from .....application.ports.pagination import Page, offset_for
from .....application.ports.user_repo import UserRepository, UserDto, UserRole
from .....exceptions import EmailTakenError

class SqlUserRepository(UserRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, user: User) -> UserDto:
        return UserDto(
            id=user.id,
            name=user.name,
            email=user.email,
            password_hash=user.password_hash,
            role=UserRole(user.role),
            specialization=user.specialization,
            photo_url=user.photo_url,
            created_at=user.created_at,
        )

    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        user = self.session.get(User, user_id)
        return self._to_dto(user) if user else None

    def get_many(self, user_ids: Iterable[str]) -> Dict[str, UserDto]:
        ids = set(user_ids)
        if not ids:
            return {}
        users = self.session.exec(select(User).where(col(User.id).in_(ids))).all()
        return {u.id: self._to_dto(u) for u in users}

    def get_by_email(self, email: str) -> Optional[UserDto]:
        user = self.session.exec(select(User).where(User.email == email.strip().lower())).first()
        return self._to_dto(user) if user else None

    def get_by_email_and_role(self, email: str, role: UserRole) -> Optional[UserDto]:
        user = self.session.exec(
            select(User)
            .where(User.email == email.strip().lower())
            .where(User.role == role.value)
        ).first()
        return self._to_dto(user) if user else None

    def create(self, name: str, email: str, password_hash: str, role: UserRole, specialization: Optional[str], photo_url: Optional[str]) -> UserDto:
        user = User(
            name=name,
            email=email.strip().lower(),
            password_hash=password_hash,
            role=role.value,
            specialization=specialization if role == UserRole.DOCTOR else None,
            photo_url=photo_url,
        )
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise EmailTakenError(user.email) from e
        self.session.refresh(user)
        return self._to_dto(user)

    def find_doctors(self, search: Optional[str], specialization: Optional[str], page: int, limit: int) -> Page[UserDto]:
        conditions = [User.role == UserRole.DOCTOR.value]
        if search:
            conditions.append(or_(
                col(User.name).icontains(search, autoescape=True),
                col(User.specialization).icontains(search, autoescape=True),
            ))
        if specialization:
            conditions.append(User.specialization == specialization)

        total = self.session.exec(select(func.count()).select_from(User).where(*conditions)).one()
        rows = self.session.exec(
            select(User)
            .where(*conditions)
            .order_by(col(User.created_at).desc(), col(User.id).desc())
            .offset(offset_for(page, limit))
            .limit(limit)
        ).all()
        return Page(items=[self._to_dto(u) for u in rows], page=page, limit=limit, total=total)
