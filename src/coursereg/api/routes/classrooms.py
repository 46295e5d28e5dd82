"""Classroom endpoints."""

from fastapi import APIRouter, Query, status

from coursereg.api.dependencies import ActorDep, AdminDep, EntityStoreDep
from coursereg.api.models import (
    APIResponse,
    ClassroomCreate,
    ClassroomResponse,
    ClassroomUpdate,
    classroom_to_response,
)

router = APIRouter(prefix="/classrooms", tags=["classrooms"])


@router.get("", response_model=APIResponse[list[ClassroomResponse]])
def list_classrooms(
    store: EntityStoreDep,
    _actor: ActorDep,
    is_active: bool | None = Query(default=None, description="Filter by active flag"),
) -> APIResponse[list[ClassroomResponse]]:
    """List classrooms."""
    classrooms = store.list_classrooms(is_active=is_active)
    return APIResponse(data=[classroom_to_response(c) for c in classrooms])


@router.post(
    "",
    response_model=APIResponse[ClassroomResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_classroom(
    classroom: ClassroomCreate, store: EntityStoreDep, _admin: AdminDep
) -> APIResponse[ClassroomResponse]:
    """Create a classroom; the room code is derived from its location."""
    created = store.create_classroom(
        building=classroom.building,
        floor=classroom.floor,
        room_number=classroom.room_number,
        room_type=classroom.room_type,
        capacity=classroom.capacity,
        is_active=classroom.is_active,
    )
    return APIResponse(data=classroom_to_response(created))


@router.get("/{classroom_id}", response_model=APIResponse[ClassroomResponse])
def get_classroom(
    classroom_id: str, store: EntityStoreDep, _actor: ActorDep
) -> APIResponse[ClassroomResponse]:
    """Get a classroom by ID."""
    return APIResponse(data=classroom_to_response(store.get_classroom(classroom_id)))


@router.patch("/{classroom_id}", response_model=APIResponse[ClassroomResponse])
def update_classroom(
    classroom_id: str, classroom: ClassroomUpdate, store: EntityStoreDep, _admin: AdminDep
) -> APIResponse[ClassroomResponse]:
    """Update a classroom (partial update)."""
    updated = store.update_classroom(
        classroom_id,
        room_type=classroom.room_type,
        capacity=classroom.capacity,
        is_active=classroom.is_active,
    )
    return APIResponse(data=classroom_to_response(updated))
