# File: opsdesk/controllers/tasks.py
from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from opsdesk.services.task_service import TaskService
from opsdesk.utils import get_json_body, query_int

tasks_bp = Blueprint('tasks', __name__, url_prefix='/api/tasks')


@tasks_bp.route('', methods=['GET'])
@login_required
def list_tasks():
    tasks = TaskService.list_tasks(
        user=current_user,
        status=request.args.get('status'),
        assignee_id=query_int('assigneeId'),
    )
    return jsonify([t.to_dict() for t in tasks])


@tasks_bp.route('', methods=['POST'])
@login_required
def create_task():
    task = TaskService.create_task(user=current_user, data=get_json_body())
    return jsonify(task.to_dict()), 201


@tasks_bp.route('/<int:task_id>', methods=['GET'])
@login_required
def get_task(task_id):
    return jsonify(TaskService.get_task(task_id).to_dict())


@tasks_bp.route('/<int:task_id>', methods=['PUT'])
@login_required
def update_task(task_id):
    task = TaskService.update_task(user=current_user, task_id=task_id, data=get_json_body())
    return jsonify(task.to_dict())


@tasks_bp.route('/<int:task_id>', methods=['DELETE'])
@login_required
def delete_task(task_id):
    TaskService.delete_task(user=current_user, task_id=task_id)
    return jsonify({'success': True})


@tasks_bp.route('/<int:task_id>/comments', methods=['GET'])
@login_required
def list_comments(task_id):
    return jsonify([c.to_dict() for c in TaskService.list_comments(task_id)])


@tasks_bp.route('/<int:task_id>/comments', methods=['POST'])
@login_required
def add_comment(task_id):
    comment = TaskService.add_comment(user=current_user, task_id=task_id, content=get_json_body().get('content'))
    return jsonify(comment.to_dict()), 201


@tasks_bp.route('/<int:task_id>/due-date', methods=['PUT'])
@login_required
def set_due_date(task_id):
    task = TaskService.set_due_date(user=current_user, task_id=task_id, due_date=get_json_body().get('dueDate'))
    return jsonify(task.to_dict())
