"""User endpoints."""

from fastapi import APIRouter, Query, status

from coursereg.api.dependencies import ActorDep, AdminDep, EntityStoreDep, MachineDep
from coursereg.api.models import (
    APIResponse,
    StudentCreditsResponse,
    UserCreate,
    UserResponse,
    UserUpdate,
    user_to_response,
)
from coursereg.registration import Actor, ForbiddenError

router = APIRouter(prefix="/users", tags=["users"])


def _require_self_or_admin(actor: Actor, user_id: str) -> None:
    if not actor.is_admin and actor.user_id != user_id:
        raise ForbiddenError("Not authorized for this user")


@router.get("", response_model=APIResponse[list[UserResponse]])
def list_users(
    store: EntityStoreDep,
    _admin: AdminDep,
    role: str | None = Query(default=None, pattern=r"^(student|teacher|admin)$"),
    school_id: str | None = Query(default=None, description="Filter by school"),
) -> APIResponse[list[UserResponse]]:
    """List users."""
    users = store.list_users(role=role, school_id=school_id)
    return APIResponse(data=[user_to_response(u) for u in users])


@router.post(
    "",
    response_model=APIResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_user(user: UserCreate, store: EntityStoreDep, _admin: AdminDep) -> APIResponse[UserResponse]:
    """Create a user. Students get a generated student number."""
    created = store.create_user(
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        role=user.role,
        school_id=user.school_id,
        max_credits=user.max_credits,
    )
    return APIResponse(data=user_to_response(created))


@router.get("/me", response_model=APIResponse[UserResponse])
def get_me(store: EntityStoreDep, actor: ActorDep) -> APIResponse[UserResponse]:
    """Get the calling user."""
    return APIResponse(data=user_to_response(store.get_user(actor.user_id)))


@router.get("/{user_id}", response_model=APIResponse[UserResponse])
def get_user(user_id: str, store: EntityStoreDep, actor: ActorDep) -> APIResponse[UserResponse]:
    """Get a user by ID."""
    _require_self_or_admin(actor, user_id)
    return APIResponse(data=user_to_response(store.get_user(user_id)))


@router.patch("/{user_id}", response_model=APIResponse[UserResponse])
def update_user(
    user_id: str, user: UserUpdate, store: EntityStoreDep, _admin: AdminDep
) -> APIResponse[UserResponse]:
    """Update a user (partial update)."""
    updated = store.update_user(
        user_id,
        first_name=user.first_name,
        last_name=user.last_name,
        max_credits=user.max_credits,
        is_active=user.is_active,
    )
    return APIResponse(data=user_to_response(updated))


@router.get("/{user_id}/credits", response_model=APIResponse[StudentCreditsResponse])
def get_student_credits(
    user_id: str,
    machine: MachineDep,
    actor: ActorDep,
    semester_id: str = Query(..., description="Semester to break the load down for"),
) -> APIResponse[StudentCreditsResponse]:
    """Get a student's credit load for one semester."""
    _require_self_or_admin(actor, user_id)
    credits = machine.student_credits(user_id, semester_id)
    return APIResponse(data=StudentCreditsResponse.model_validate(credits))
