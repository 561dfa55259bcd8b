from dataclasses import dataclass
from typing import List, Optional

from ...exceptions import ValidationError
from ..ports.pagination import Page
from ..ports.user_repo import UserDto, UserRepository

SPECIALIZATIONS: List[str] = [
    "Cardiology",
    "Dermatology",
    "Emergency Medicine",
    "Family Medicine",
    "Gastroenterology",
    "General Surgery",
    "Internal Medicine",
    "Neurology",
    "Obstetrics and Gynecology",
    "Oncology",
    "Ophthalmology",
    "Orthopedics",
    "Otolaryngology",
    "Pediatrics",
    "Psychiatry",
    "Pulmonology",
    "Radiology",
    "Urology",
]


@dataclass
class DirectoryService:
    user_repo: UserRepository
    max_limit: int = 100

    def find_doctors(self, search: Optional[str] = None, specialization: Optional[str] = None, page: int = 1, limit: int = 10) -> Page[UserDto]:
        if page < 1:
            raise ValidationError("page must be a positive integer")
        if limit < 1 or limit > self.max_limit:
            raise ValidationError(f"limit must be between 1 and {self.max_limit}")
        search = search.strip() if search else None
        return self.user_repo.find_doctors(search or None, specialization or None, page, limit)

    def specializations(self) -> List[str]:
        return list(SPECIALIZATIONS)
