"""
Task API endpoints, nested under a team.

Every operation requires the caller to be a member of the team, and a task
is only reachable through the team that owns it.
"""

import logging
import math
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, joinedload

import models
import schemas
from database import get_db, commit_or_rollback
from errors import ValidationError
from validations import parse_positive_int, validate_required, validate_strings
from auth.dependencies import get_current_user
from auth.permissions import (
    get_team_or_404,
    get_team_task_or_404,
    parse_user_id,
    require_assignable,
    require_team_member,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/teams/{team_id}/tasks", tags=["tasks"])

STATUS_ERROR = "Status must be TODO, DOING, or DONE"


def parse_status(value) -> Optional[models.TaskStatus]:
    """Convert a status string to TaskStatus, raising ValidationError for unknown values."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(STATUS_ERROR)
    try:
        return models.TaskStatus(value)
    except ValueError:
        raise ValidationError(STATUS_ERROR)


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so search terms match literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _task_response(task_id: int, team_id: int, db: Session) -> schemas.TaskResponse:
    db.expire_all()
    task = get_team_task_or_404(team_id, task_id, db)
    return schemas.TaskResponse(data=schemas.Task.model_validate(task))


@router.post("", response_model=schemas.TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    team_id: int,
    task: schemas.TaskCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a task in the team; an assignee must be a team member."""
    team = get_team_or_404(team_id, db)
    require_team_member(team, current_user, "Only team members can create tasks")

    body = task.model_dump()
    errors = validate_required(["title"], body) or validate_strings(["title", "description"], body)
    if errors:
        raise ValidationError(", ".join(errors))

    task_status = parse_status(task.status) or models.TaskStatus.TODO

    assigned_to_id = parse_user_id(task.assigned_to)
    if assigned_to_id is not None:
        require_assignable(team, assigned_to_id)

    logger.debug(f"User {current_user.id} creating task in team {team_id}: {task.title}")

    db_task = models.Task(
        title=task.title.strip(),
        description=(task.description or "").strip(),
        status=task_status,
        assigned_to_id=assigned_to_id,
        team_id=team_id,
        created_by_id=current_user.id,
    )
    db.add(db_task)
    commit_or_rollback(db)

    logger.info(f"Task created: {db_task.id} in team {team_id} by user {current_user.id}")
    return _task_response(db_task.id, team_id, db)


@router.get("", response_model=schemas.TaskListResponse)
def list_tasks(
    team_id: int,
    search: Optional[str] = Query(None, description="Case-insensitive substring of the title"),
    assigned_to: Optional[str] = Query(None, alias="assignedTo"),
    task_status: Optional[str] = Query(None, alias="status"),
    page: Optional[str] = Query(None, description="1-indexed page number, default 1"),
    limit: Optional[str] = Query(None, description="Page size, default 10"),
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List the team's tasks, newest first, with filtering and pagination.

    Filters:
        search: case-insensitive substring match on title
        assignedTo: exact assignee id
        status: exact status (TODO, DOING, DONE)

    Pagination:
        page is 1-indexed; pages = ceil(total / limit)
    """
    team = get_team_or_404(team_id, db)
    require_team_member(team, current_user, "Only team members can view tasks")

    page_number = parse_positive_int("page", page, default=1)
    page_size = parse_positive_int("limit", limit, default=10)
    assignee_id = parse_user_id(assigned_to)
    status_filter = parse_status(task_status)

    query = db.query(models.Task).filter(models.Task.team_id == team_id)

    if search:
        query = query.filter(models.Task.title.ilike(f"%{escape_like(search)}%", escape="\\"))

    if assignee_id is not None:
        query = query.filter(models.Task.assigned_to_id == assignee_id)

    if status_filter is not None:
        query = query.filter(models.Task.status == status_filter)

    total = query.count()

    tasks = (
        query.options(joinedload(models.Task.assigned_to), joinedload(models.Task.created_by))
        .order_by(models.Task.created_at.desc(), models.Task.id.desc())
        .offset((page_number - 1) * page_size)
        .limit(page_size)
        .all()
    )

    logger.info(f"User {current_user.id} retrieved {len(tasks)} of {total} tasks for team {team_id}")
    return schemas.TaskListResponse(
        count=len(tasks),
        total=total,
        page=page_number,
        pages=math.ceil(total / page_size),
        data=[schemas.Task.model_validate(t) for t in tasks],
    )


@router.get("/{task_id}", response_model=schemas.TaskResponse)
def get_task(
    team_id: int,
    task_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a single task of the team."""
    team = get_team_or_404(team_id, db)
    require_team_member(team, current_user, "Only team members can view tasks")

    task = get_team_task_or_404(team_id, task_id, db)
    return schemas.TaskResponse(data=schemas.Task.model_validate(task))


@router.put("/{task_id}", response_model=schemas.TaskResponse)
def update_task(
    team_id: int,
    task_id: int,
    task_update: schemas.TaskUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Partially update a task.

    Only fields present in the body are changed. assignedTo set to null or
    an empty string clears the assignment; omitting it leaves it untouched.
    """
    team = get_team_or_404(team_id, db)
    require_team_member(team, current_user, "Only team members can update tasks")

    task = get_team_task_or_404(team_id, task_id, db)

    update_data = task_update.model_dump(exclude_unset=True)
    logger.debug(f"User {current_user.id} updating task {task_id} fields: {sorted(update_data)}")

    errors = validate_strings(["title", "description"], update_data)
    if errors:
        raise ValidationError(", ".join(errors))

    if "title" in update_data:
        if validate_required(["title"], update_data):
            raise ValidationError("title cannot be empty")
        update_data["title"] = update_data["title"].strip()

    if "description" in update_data:
        update_data["description"] = (update_data["description"] or "").strip()

    if "status" in update_data:
        if update_data["status"] is None:
            raise ValidationError(STATUS_ERROR)
        update_data["status"] = parse_status(update_data["status"])

    if "assigned_to" in update_data:
        assigned_to_id = parse_user_id(update_data.pop("assigned_to"))
        if assigned_to_id is not None:
            require_assignable(team, assigned_to_id)
        update_data["assigned_to_id"] = assigned_to_id

    for key, value in update_data.items():
        setattr(task, key, value)

    commit_or_rollback(db)

    logger.info(f"Task updated: {task_id} in team {team_id} by user {current_user.id}")
    return _task_response(task_id, team_id, db)


@router.delete("/{task_id}", response_model=schemas.DeletedResponse)
def delete_task(
    team_id: int,
    task_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a task and its comments."""
    team = get_team_or_404(team_id, db)
    require_team_member(team, current_user, "Only team members can delete tasks")

    task = get_team_task_or_404(team_id, task_id, db)

    db.delete(task)
    commit_or_rollback(db)

    logger.info(f"Task deleted: {task_id} from team {team_id} by user {current_user.id}")
    return schemas.DeletedResponse(message="Task deleted successfully")
