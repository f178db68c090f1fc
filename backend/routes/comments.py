"""Comment API endpoints, nested under a team's task."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session, joinedload

import models
import schemas
from database import get_db, commit_or_rollback
from errors import ValidationError
from validations import validate_required, validate_strings
from auth.dependencies import get_current_user
from auth.permissions import get_team_or_404, get_team_task_or_404, require_team_member

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/teams/{team_id}/tasks/{task_id}/comments", tags=["comments"])


@router.post("", response_model=schemas.CommentResponse, status_code=status.HTTP_201_CREATED)
def create_comment(
    team_id: int,
    task_id: int,
    comment: schemas.CommentCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add a comment to a task (team members only)."""
    team = get_team_or_404(team_id, db)
    require_team_member(team, current_user, "Only team members can comment on tasks")

    get_team_task_or_404(team_id, task_id, db)

    body = comment.model_dump()
    errors = validate_required(["text"], body) or validate_strings(["text"], body)
    if errors:
        raise ValidationError(", ".join(errors))

    db_comment = models.Comment(
        text=comment.text.strip(),
        task_id=task_id,
        created_by_id=current_user.id,
    )
    db.add(db_comment)
    commit_or_rollback(db)

    db_comment = (
        db.query(models.Comment)
        .options(joinedload(models.Comment.created_by))
        .filter(models.Comment.id == db_comment.id)
        .first()
    )

    logger.info(f"Comment {db_comment.id} added to task {task_id} by user {current_user.id}")
    return schemas.CommentResponse(data=schemas.Comment.model_validate(db_comment))


@router.get("", response_model=schemas.CommentListResponse)
def list_comments(
    team_id: int,
    task_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List a task's comments, newest first (team members only)."""
    team = get_team_or_404(team_id, db)
    require_team_member(team, current_user, "Only team members can view comments")

    get_team_task_or_404(team_id, task_id, db)

    comments = (
        db.query(models.Comment)
        .options(joinedload(models.Comment.created_by))
        .filter(models.Comment.task_id == task_id)
        .order_by(models.Comment.created_at.desc(), models.Comment.id.desc())
        .all()
    )

    logger.debug(f"User {current_user.id} retrieved {len(comments)} comments for task {task_id}")
    return schemas.CommentListResponse(
        count=len(comments),
        data=[schemas.Comment.model_validate(c) for c in comments],
    )
