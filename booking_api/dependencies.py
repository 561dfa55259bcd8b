from dataclasses import dataclass
from typing import Iterator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from .application.ports.appointments_repo import AppointmentFilters, AppointmentsRepository
from .application.ports.user_repo import UserRepository
from .application.services.appointments_service import AppointmentsService
from .application.services.auth_service import AuthService
from .application.services.directory_service import DirectoryService
from .application.services.listing_service import ListingService
from .application.services.policies import Actor
from .exceptions import AuthError
from .infrastructure.persistence.sqlalchemy.repositories.appointments_repository_sql import SqlAppointmentsRepository
from .infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository

oauth2_scheme = HTTPBearer(auto_error=False)


@dataclass
class Repositories:
    users: UserRepository
    appointments: AppointmentsRepository


def get_repositories(request: Request) -> Iterator[Repositories]:
    state = request.app.state
    if state.memory_store is not None:
        yield Repositories(users=state.memory_store.users, appointments=state.memory_store.appointments)
        return
    with Session(state.engine) as session:
        yield Repositories(users=SqlUserRepository(session), appointments=SqlAppointmentsRepository(session))


def get_auth_service(request: Request, repos: Repositories = Depends(get_repositories)) -> AuthService:
    state = request.app.state
    return AuthService(user_repo=repos.users, hasher=state.hasher, tokens=state.tokens, audit=state.audit)


def get_appointments_service(request: Request, repos: Repositories = Depends(get_repositories)) -> AppointmentsService:
    state = request.app.state
    return AppointmentsService(repo=repos.appointments, user_repo=repos.users, audit=state.audit, clock=state.clock)


def get_listing_service(repos: Repositories = Depends(get_repositories)) -> ListingService:
    return ListingService(repo=repos.appointments, user_repo=repos.users)


def get_directory_service(request: Request, repos: Repositories = Depends(get_repositories)) -> DirectoryService:
    return DirectoryService(user_repo=repos.users, max_limit=request.app.state.settings.PAGE_SIZE_MAX)


def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(oauth2_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> Actor:
    if not credentials or not credentials.credentials:
        raise AuthError("Authentication required")
    return auth_service.authenticate(credentials.credentials)


def appointment_filters(
    request: Request,
    status: Optional[str] = None,
    date: Optional[str] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
) -> AppointmentFilters:
    return AppointmentFilters.parse(
        status=status,
        date_str=date,
        page=page,
        limit=limit,
        max_limit=request.app.state.settings.PAGE_SIZE_MAX,
    )
