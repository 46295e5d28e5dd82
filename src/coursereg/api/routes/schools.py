"""School endpoints."""

from fastapi import APIRouter, status

from coursereg.api.dependencies import ActorDep, AdminDep, EntityStoreDep
from coursereg.api.models import (
    APIResponse,
    SchoolCreate,
    SchoolResponse,
    SchoolUpdate,
    school_to_response,
)

router = APIRouter(prefix="/schools", tags=["schools"])


@router.get("", response_model=APIResponse[list[SchoolResponse]])
def list_schools(store: EntityStoreDep, _actor: ActorDep) -> APIResponse[list[SchoolResponse]]:
    """List all schools."""
    return APIResponse(data=[school_to_response(s) for s in store.list_schools()])


@router.post(
    "",
    response_model=APIResponse[SchoolResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_school(
    school: SchoolCreate, store: EntityStoreDep, _admin: AdminDep
) -> APIResponse[SchoolResponse]:
    """Create a new school."""
    created = store.create_school(school.school_code, school.school_name)
    return APIResponse(data=school_to_response(created))


@router.get("/{school_id}", response_model=APIResponse[SchoolResponse])
def get_school(school_id: str, store: EntityStoreDep, _actor: ActorDep) -> APIResponse[SchoolResponse]:
    """Get a school by ID."""
    return APIResponse(data=school_to_response(store.get_school(school_id)))


@router.patch("/{school_id}", response_model=APIResponse[SchoolResponse])
def update_school(
    school_id: str, school: SchoolUpdate, store: EntityStoreDep, _admin: AdminDep
) -> APIResponse[SchoolResponse]:
    """Update a school (partial update)."""
    updated = store.update_school(school_id, school_name=school.school_name)
    return APIResponse(data=school_to_response(updated))
