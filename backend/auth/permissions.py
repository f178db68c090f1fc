"""
Team-level permission checking utilities.

Access to a team, its tasks and their comments is decided by team
membership; membership changes are reserved for the team creator.

The is_* functions are pure decisions over already-loaded entities. The
get_*/require_* helpers load entities and raise the matching API error, and
handlers call them in a fixed order: team exists (404), caller allowed (403),
nested entity exists (404), then field validation (400).
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from errors import AuthorizationError, NotFoundError, ValidationError
from models import User, Team, TeamMember, Task

logger = logging.getLogger(__name__)


def is_team_member(team: Team, user_id: Optional[int]) -> bool:
    """
    Check whether user_id appears in the team's member set.

    Example:
        >>> if not is_team_member(team, current_user.id):
        ...     raise AuthorizationError("You are not a member of this team")
    """
    if user_id is None:
        return False
    return user_id in team.member_ids


def is_team_creator(team: Team, user_id: Optional[int]) -> bool:
    """Check whether user_id is the user who created the team."""
    return user_id is not None and team.created_by == user_id


def get_team_or_404(team_id: int, db: Session) -> Team:
    """
    Load a team with its creator and members populated.

    Raises:
        NotFoundError: 404 if no team has this id
    """
    team = (
        db.query(Team)
        .options(
            joinedload(Team.creator),
            joinedload(Team.memberships).joinedload(TeamMember.user),
        )
        .filter(Team.id == team_id)
        .first()
    )
    if team is None:
        logger.info(f"Team {team_id} not found")
        raise NotFoundError("Team not found")
    return team


def require_team_member(team: Team, user: User, message: str = "You are not a member of this team") -> None:
    """
    Require the user to be a member of the team.

    Raises:
        AuthorizationError: 403 if the user is not a member
    """
    if not is_team_member(team, user.id):
        logger.info(f"User {user.id} is not a member of team {team.id}, access denied")
        raise AuthorizationError(message)
    logger.debug(f"Membership check passed for user {user.id} on team {team.id}")


def require_team_creator(team: Team, user: User, message: str = "Only team creator can manage members") -> None:
    """
    Require the user to be the creator of the team.

    Raises:
        AuthorizationError: 403 if the user did not create the team
    """
    if not is_team_creator(team, user.id):
        logger.info(f"User {user.id} is not the creator of team {team.id}, access denied")
        raise AuthorizationError(message)


def get_team_task_or_404(team_id: int, task_id: int, db: Session) -> Task:
    """
    Load a task scoped to the given team.

    A task that exists but belongs to another team is reported as missing.

    Raises:
        NotFoundError: 404 if the (team_id, task_id) pair matches no task
    """
    task = (
        db.query(Task)
        .options(joinedload(Task.assigned_to), joinedload(Task.created_by))
        .filter(Task.id == task_id, Task.team_id == team_id)
        .first()
    )
    if task is None:
        logger.info(f"Task {task_id} not found in team {team_id}")
        raise NotFoundError("Task not found")
    return task


def parse_user_id(value) -> Optional[int]:
    """
    Normalize a user reference from a request body.

    Returns:
        None for null or blank values, the integer id otherwise

    Raises:
        ValidationError: 400 if the value is not a valid user id
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if value == "":
            return None
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValidationError("Invalid user id")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("Invalid user id")


def require_assignable(team: Team, user_id: int) -> None:
    """
    Require that a task in this team may be assigned to user_id.

    Raises:
        ValidationError: 400 if the user is not a member of the team
    """
    if not is_team_member(team, user_id):
        logger.info(f"Rejected assignment of user {user_id}: not a member of team {team.id}")
        raise ValidationError("Can only assign tasks to team members")
