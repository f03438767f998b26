# File: opsdesk/controllers/pages.py
from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from opsdesk.services.page_service import PageService
from opsdesk.utils import get_json_body

pages_bp = Blueprint('pages', __name__, url_prefix='/api/pages')


@pages_bp.route('', methods=['GET'])
@login_required
def list_pages():
    return jsonify([p.to_dict() for p in PageService.list_pages(user=current_user)])


@pages_bp.route('', methods=['POST'])
@login_required
def create_page():
    page = PageService.create_page(user=current_user, data=get_json_body())
    return jsonify(page.to_dict(with_blocks=True)), 201


@pages_bp.route('/<int:page_id>', methods=['GET'])
@login_required
def get_page(page_id):
    return jsonify(PageService.get_page(user=current_user, page_id=page_id).to_dict(with_blocks=True))


@pages_bp.route('/<int:page_id>', methods=['PATCH'])
@login_required
def update_page(page_id):
    page = PageService.update_page(user=current_user, page_id=page_id, data=get_json_body())
    return jsonify(page.to_dict())


@pages_bp.route('/<int:page_id>', methods=['DELETE'])
@login_required
def delete_page(page_id):
    PageService.delete_page(user=current_user, page_id=page_id)
    return jsonify({'success': True})


@pages_bp.route('/<int:page_id>/blocks', methods=['POST'])
@login_required
def add_block(page_id):
    block = PageService.add_block(user=current_user, page_id=page_id, data=get_json_body())
    return jsonify(block.to_dict()), 201


@pages_bp.route('/<int:page_id>/blocks', methods=['PATCH'])
@login_required
def update_blocks(page_id):
    blocks = PageService.update_blocks(user=current_user, page_id=page_id, blocks=get_json_body().get('blocks'))
    return jsonify([b.to_dict() for b in blocks])


@pages_bp.route('/<int:page_id>/blocks', methods=['DELETE'])
@login_required
def delete_block(page_id):
    PageService.delete_block(user=current_user, page_id=page_id, block_id=request.args.get('blockId'))
    return jsonify({'success': True})


@pages_bp.route('/<int:page_id>/analyze-title', methods=['POST'])
@login_required
def analyze_title(page_id):
    return jsonify(PageService.analyze_title(user=current_user, page_id=page_id))
