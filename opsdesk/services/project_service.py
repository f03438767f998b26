from __future__ import annotations

import logging

from sqlalchemy import or_, select

from ..common.validators import require_non_empty, validate_enum, validate_string
from ..core.enums import ProjectRole, ProjectStatus, values_of
from ..core.exceptions import AuthorizationError, ValidationError
from ..extensions import db
from ..models.invoice import Client
from ..models.project import Project, ProjectMember
from ..models.user import User
from .base import get_or_404, optional_int

log = logging.getLogger(__name__)

PROJECT_EDITOR_ROLES = (ProjectRole.OWNER.value, ProjectRole.ADMIN.value)


def _member_ids(raw, owner_id: int) -> list[int]:
    if raw in (None, ""):
        return []
    if not isinstance(raw, list):
        raise ValidationError("memberIds must be a list")
    ids: list[int] = []
    for value in raw:
        uid = optional_int(value, "memberIds")
        if uid is not None and uid != owner_id and uid not in ids:
            ids.append(uid)
    if ids and User.query.filter(User.id.in_(ids)).count() != len(ids):
        raise ValidationError("Some members do not exist")
    return ids


class ProjectService:
    @staticmethod
    def list_projects(*, user: User) -> list[Project]:
        member_of = select(ProjectMember.project_id).where(ProjectMember.user_id == user.id)
        return (
            Project.query.filter(or_(Project.created_by_id == user.id, Project.id.in_(member_of)))
            .order_by(Project.updated_at.desc(), Project.id.desc())
            .all()
        )

    @staticmethod
    def create_project(*, user: User, data: dict) -> Project:
        if not user.is_manager:
            raise AuthorizationError("Forbidden")
        name = require_non_empty(data.get("name"), "Name", "Project name is required")
        client_id = optional_int(data.get("clientId"), "clientId")
        if client_id:
            get_or_404(Client, client_id, "Client not found")

        project = Project(
            name=validate_string(name, "Name", max_length=200),
            description=validate_string(data.get("description"), "Description") or None,
            color=validate_string(data.get("color"), "Color", max_length=20) or "#3b82f6",
            status=validate_enum(data.get("status"), "status", values_of(ProjectStatus), default=ProjectStatus.ACTIVE.value),
            client_id=client_id,
            created_by_id=user.id,
        )
        project.members.append(ProjectMember(user_id=user.id, role=ProjectRole.OWNER.value))
        for uid in _member_ids(data.get("memberIds"), user.id):
            project.members.append(ProjectMember(user_id=uid, role=ProjectRole.MEMBER.value))

        db.session.add(project)
        db.session.commit()
        log.info("Project %s created by %s", project.id, user.id)
        return project

    @staticmethod
    def get_project(*, user: User, project_id: int) -> Project:
        project = get_or_404(Project, project_id, "Project not found")
        if project.member_role(user.id) is None and not user.is_admin:
            raise AuthorizationError("Forbidden")
        return project

    @staticmethod
    def update_project(*, user: User, project_id: int, data: dict) -> Project:
        project = get_or_404(Project, project_id, "Project not found")
        if project.member_role(user.id) not in PROJECT_EDITOR_ROLES and not user.is_admin:
            raise AuthorizationError("Forbidden")

        if "name" in data:
            project.name = require_non_empty(data["name"], "Name", "Project name is required")
        if "description" in data:
            project.description = validate_string(data["description"], "Description") or None
        if "color" in data:
            project.color = validate_string(data["color"], "Color", max_length=20) or project.color
        if "status" in data:
            project.status = validate_enum(data["status"], "status", values_of(ProjectStatus), required=True)
        if "clientId" in data:
            client_id = optional_int(data["clientId"], "clientId")
            if client_id:
                get_or_404(Client, client_id, "Client not found")
            project.client_id = client_id

        db.session.commit()
        return project

    @staticmethod
    def delete_project(*, user: User, project_id: int) -> None:
        project = get_or_404(Project, project_id, "Project not found")
        if project.member_role(user.id) != ProjectRole.OWNER.value and not user.is_super_admin:
            raise AuthorizationError("Forbidden")
        db.session.delete(project)
        db.session.commit()
        log.info("Project %s deleted by %s", project_id, user.id)

    @staticmethod
    def list_members(*, user: User, project_id: int) -> list[ProjectMember]:
        return list(ProjectService.get_project(user=user, project_id=project_id).members)

    @staticmethod
    def add_member(*, user: User, project_id: int, data: dict) -> ProjectMember:
        project = get_or_404(Project, project_id, "Project not found")
        if project.member_role(user.id) not in PROJECT_EDITOR_ROLES and not user.is_admin:
            raise AuthorizationError("Forbidden")

        uid = optional_int(data.get("userId"), "userId")
        if not uid:
            raise ValidationError("userId is required")
        get_or_404(User, uid, "User not found")
        if project.member_role(uid) is not None:
            raise ValidationError("User is already a member")
        role = validate_enum(
            data.get("role"), "role", (ProjectRole.ADMIN.value, ProjectRole.MEMBER.value),
            default=ProjectRole.MEMBER.value,
        )

        member = ProjectMember(user_id=uid, role=role)
        project.members.append(member)
        db.session.commit()
        return member
