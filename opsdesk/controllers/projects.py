# File: opsdesk/controllers/projects.py
from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from opsdesk.services.project_service import ProjectService
from opsdesk.utils import get_json_body

projects_bp = Blueprint('projects', __name__, url_prefix='/api/projects')


@projects_bp.route('', methods=['GET'])
@login_required
def list_projects():
    return jsonify([p.to_dict() for p in ProjectService.list_projects(user=current_user)])


@projects_bp.route('', methods=['POST'])
@login_required
def create_project():
    project = ProjectService.create_project(user=current_user, data=get_json_body())
    return jsonify(project.to_dict()), 201


@projects_bp.route('/<int:project_id>', methods=['GET'])
@login_required
def get_project(project_id):
    return jsonify(ProjectService.get_project(user=current_user, project_id=project_id).to_dict())


@projects_bp.route('/<int:project_id>', methods=['PUT'])
@login_required
def update_project(project_id):
    project = ProjectService.update_project(user=current_user, project_id=project_id, data=get_json_body())
    return jsonify(project.to_dict())


@projects_bp.route('/<int:project_id>', methods=['DELETE'])
@login_required
def delete_project(project_id):
    ProjectService.delete_project(user=current_user, project_id=project_id)
    return jsonify({'success': True})


@projects_bp.route('/<int:project_id>/members', methods=['GET'])
@login_required
def list_members(project_id):
    return jsonify([m.to_dict() for m in ProjectService.list_members(user=current_user, project_id=project_id)])


@projects_bp.route('/<int:project_id>/members', methods=['POST'])
@login_required
def add_member(project_id):
    member = ProjectService.add_member(user=current_user, project_id=project_id, data=get_json_body())
    return jsonify(member.to_dict()), 201
