from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Any, Optional, List

from models import TaskStatus


# Output models are read straight from ORM objects and serialized with camelCase keys.
# Renamed fields list both the ORM attribute and the public key as validation aliases,
# since FastAPI re-validates dumped (by-alias) content against the response model.
class ApiModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


# User schemas
class UserPublic(ApiModel):
    id: int
    name: str
    email: str


class UserWithToken(UserPublic):
    token: str


# Auth request schemas
# Fields are optional at the schema level; handlers report missing ones themselves.
class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


# Team schemas
class TeamCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class TeamMemberCreate(ApiModel):
    user_id: Optional[Any] = None


class Team(ApiModel):
    id: int
    name: str
    description: str = ""
    creator: UserPublic
    members: List[UserPublic] = []
    created_at: datetime
    updated_at: datetime


# Task schemas
# Request fields accept any JSON type; handlers check types after membership.
class TaskCreate(ApiModel):
    title: Optional[Any] = None
    description: Optional[Any] = None
    status: Optional[Any] = None
    assigned_to: Optional[Any] = None


class TaskUpdate(ApiModel):
    title: Optional[Any] = None
    description: Optional[Any] = None
    status: Optional[Any] = None
    assigned_to: Optional[Any] = None


class Task(ApiModel):
    id: int
    title: str
    description: str = ""
    status: TaskStatus
    assigned_to: Optional[UserPublic] = None
    created_by: UserPublic
    team: int = Field(validation_alias=AliasChoices("team_id", "team"))
    created_at: datetime
    updated_at: datetime


# Comment schemas
class CommentCreate(BaseModel):
    text: Optional[Any] = None


class Comment(ApiModel):
    id: int
    text: str
    task: int = Field(validation_alias=AliasChoices("task_id", "task"))
    created_by: UserPublic
    created_at: datetime
    updated_at: datetime


# Response envelopes
class MessageResponse(BaseModel):
    success: bool = True
    message: str


class DeletedResponse(MessageResponse):
    data: dict = Field(default_factory=dict)


class AuthResponse(BaseModel):
    success: bool = True
    data: UserWithToken


class UserResponse(BaseModel):
    success: bool = True
    data: UserPublic


class TeamResponse(BaseModel):
    success: bool = True
    data: Team


class TeamListResponse(BaseModel):
    success: bool = True
    count: int
    data: List[Team] = []


class TaskResponse(BaseModel):
    success: bool = True
    data: Task


class TaskListResponse(BaseModel):
    success: bool = True
    count: int
    total: int
    page: int
    pages: int
    data: List[Task] = []


class CommentResponse(BaseModel):
    success: bool = True
    data: Comment


class CommentListResponse(BaseModel):
    success: bool = True
    count: int
    data: List[Comment] = []
