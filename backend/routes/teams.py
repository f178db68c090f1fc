"""
Team API endpoints: create/list/get teams and manage membership.

Only members can view a team; only the creator can add or remove members,
and the creator can never be removed.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

import models
import schemas
from database import get_db, commit_or_rollback
from errors import NotFoundError, ValidationError
from validations import validate_required
from auth.dependencies import get_current_user
from auth.permissions import (
    get_team_or_404,
    is_team_creator,
    is_team_member,
    parse_user_id,
    require_team_creator,
    require_team_member,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/teams", tags=["teams"])


def _team_response(team_id: int, db: Session) -> schemas.TeamResponse:
    # Reload so the response reflects committed membership
    db.expire_all()
    team = get_team_or_404(team_id, db)
    return schemas.TeamResponse(data=schemas.Team.model_validate(team))


@router.post("", response_model=schemas.TeamResponse, status_code=status.HTTP_201_CREATED)
def create_team(
    team: schemas.TeamCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new team with the caller as creator and sole member."""
    errors = validate_required(["name"], team.model_dump())
    if errors:
        raise ValidationError(", ".join(errors))

    logger.debug(f"User {current_user.id} creating team: {team.name}")

    db_team = models.Team(
        name=team.name.strip(),
        description=(team.description or "").strip(),
        created_by=current_user.id,
    )
    db.add(db_team)
    db.flush()  # Get team ID without committing

    db.add(models.TeamMember(team_id=db_team.id, user_id=current_user.id))
    commit_or_rollback(db)

    logger.info(f"Team created: {db_team.name} (ID: {db_team.id}) by user {current_user.id}")
    return _team_response(db_team.id, db)


@router.get("", response_model=schemas.TeamListResponse)
def list_teams(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List all teams the current user is a member of, newest first."""
    logger.debug(f"User {current_user.id} listing teams")

    teams = (
        db.query(models.Team)
        .join(models.TeamMember, models.TeamMember.team_id == models.Team.id)
        .filter(models.TeamMember.user_id == current_user.id)
        .options(
            joinedload(models.Team.creator),
            joinedload(models.Team.memberships).joinedload(models.TeamMember.user),
        )
        .order_by(models.Team.created_at.desc(), models.Team.id.desc())
        .all()
    )

    logger.info(f"User {current_user.id} retrieved {len(teams)} teams")
    return schemas.TeamListResponse(
        count=len(teams),
        data=[schemas.Team.model_validate(t) for t in teams],
    )


@router.get("/{team_id}", response_model=schemas.TeamResponse)
def get_team(
    team_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get team details with creator and members (requires member access)."""
    logger.debug(f"User {current_user.id} requesting team {team_id}")

    team = get_team_or_404(team_id, db)
    require_team_member(team, current_user)

    return schemas.TeamResponse(data=schemas.Team.model_validate(team))


@router.post("/{team_id}/members", response_model=schemas.TeamResponse)
def add_team_member(
    team_id: int,
    member: schemas.TeamMemberCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add a member to a team (creator only)."""
    team = get_team_or_404(team_id, db)
    require_team_creator(team, current_user, "Only team creator can add members")

    errors = validate_required(["userId"], {"userId": member.user_id})
    if errors:
        raise ValidationError(", ".join(errors))
    user_id = parse_user_id(member.user_id)

    logger.debug(f"User {current_user.id} adding member {user_id} to team {team_id}")

    user = db.query(models.User).filter(models.User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")

    if is_team_member(team, user_id):
        raise ValidationError("User is already a member of this team")

    # The unique (team_id, user_id) constraint rejects a concurrent duplicate add
    db.add(models.TeamMember(team_id=team_id, user_id=user_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(f"Concurrent add of user {user_id} to team {team_id} rejected")
        raise ValidationError("User is already a member of this team")

    logger.info(f"User {user_id} added to team {team_id}")
    return _team_response(team_id, db)


@router.delete("/{team_id}/members/{user_id}", response_model=schemas.TeamResponse)
def remove_team_member(
    team_id: int,
    user_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Remove a member from a team (creator only; the creator cannot be removed)."""
    team = get_team_or_404(team_id, db)
    require_team_creator(team, current_user, "Only team creator can remove members")

    if is_team_creator(team, user_id):
        logger.warning(f"User {current_user.id} attempted to remove the creator of team {team_id}")
        raise ValidationError("Cannot remove team creator")

    logger.debug(f"User {current_user.id} removing member {user_id} from team {team_id}")

    # Single conditional delete; the creator row is excluded in the same statement
    deleted = (
        db.query(models.TeamMember)
        .filter(
            models.TeamMember.team_id == team_id,
            models.TeamMember.user_id == user_id,
            models.TeamMember.user_id != team.created_by,
        )
        .delete(synchronize_session=False)
    )
    if deleted == 0:
        db.rollback()
        raise ValidationError("User is not a member of this team")

    commit_or_rollback(db)

    logger.info(f"User {user_id} removed from team {team_id}")
    return _team_response(team_id, db)
