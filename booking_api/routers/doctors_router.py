from typing import Optional
from fastapi import APIRouter, Depends, Query

from ..application.services.directory_service import DirectoryService
from ..dependencies import get_directory_service
from ..exceptions import create_success_response

router = APIRouter(tags=["Doctors"])


@router.get("/doctors")
def get_doctors(
    search: Optional[str] = Query(None),
    specialization: Optional[str] = Query(None),
    page: int = Query(1),
    limit: int = Query(10),
    directory: DirectoryService = Depends(get_directory_service),
):
    result = directory.find_doctors(search=search, specialization=specialization, page=page, limit=limit)
    return create_success_response(
        [d.profile() for d in result.items],
        pagination=result.pagination(),
    )


@router.get("/specializations")
def get_specializations(directory: DirectoryService = Depends(get_directory_service)):
    return create_success_response(directory.specializations())
