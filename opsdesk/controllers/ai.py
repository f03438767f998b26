# File: opsdesk/controllers/ai.py
from flask import Blueprint, current_app, jsonify
from flask_login import current_user, login_required

from opsdesk.ai.service import ChatService
from opsdesk.extensions import limiter
from opsdesk.utils import get_json_body

ai_bp = Blueprint('ai', __name__, url_prefix='/api/ai')


def chat_rate_limit():
    return f"{current_app.config['CHAT_RATE_LIMIT']} per {current_app.config['CHAT_RATE_WINDOW_SECONDS']} seconds"


@ai_bp.route('/chat', methods=['POST'])
@limiter.limit(chat_rate_limit, scope='chat')
@login_required
def chat():
    return jsonify(ChatService.chat(user=current_user, prompt=get_json_body().get('prompt')))
