"""Subject endpoints."""

from fastapi import APIRouter, Query, status

from coursereg.api.dependencies import ActorDep, AdminDep, EntityStoreDep
from coursereg.api.models import (
    APIResponse,
    SubjectCreate,
    SubjectResponse,
    SubjectUpdate,
    subject_to_response,
)

router = APIRouter(prefix="/subjects", tags=["subjects"])


@router.get("", response_model=APIResponse[list[SubjectResponse]])
def list_subjects(
    store: EntityStoreDep,
    _actor: ActorDep,
    school_id: str | None = Query(default=None, description="Only subjects open to this school"),
) -> APIResponse[list[SubjectResponse]]:
    """List subjects."""
    subjects = store.list_subjects(school_id=school_id)
    return APIResponse(data=[subject_to_response(s) for s in subjects])


@router.post(
    "",
    response_model=APIResponse[SubjectResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_subject(
    subject: SubjectCreate, store: EntityStoreDep, _admin: AdminDep
) -> APIResponse[SubjectResponse]:
    """Create a new subject."""
    created = store.create_subject(
        subject_code=subject.subject_code,
        subject_name=subject.subject_name,
        credits=subject.credits,
        category=subject.category,
        school_ids=subject.school_ids,
    )
    return APIResponse(data=subject_to_response(created))


@router.get("/{subject_id}", response_model=APIResponse[SubjectResponse])
def get_subject(subject_id: str, store: EntityStoreDep, _actor: ActorDep) -> APIResponse[SubjectResponse]:
    """Get a subject by ID."""
    return APIResponse(data=subject_to_response(store.get_subject(subject_id)))


@router.patch("/{subject_id}", response_model=APIResponse[SubjectResponse])
def update_subject(
    subject_id: str, subject: SubjectUpdate, store: EntityStoreDep, _admin: AdminDep
) -> APIResponse[SubjectResponse]:
    """Update a subject (partial update)."""
    updated = store.update_subject(
        subject_id,
        subject_name=subject.subject_name,
        credits=subject.credits,
        category=subject.category,
        school_ids=subject.school_ids,
    )
    return APIResponse(data=subject_to_response(updated))
