# File: opsdesk/__init__.py
import importlib
import logging

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_login import current_user

from config import get_settings_module
from opsdesk.ai.client import EXTENSION_KEY as CHAT_CLIENT_KEY, ChatClient
from opsdesk.errors import register_error_handlers
from opsdesk.extensions import db, limiter, login_manager

log = logging.getLogger(__name__)


def create_app(settings_module=None):
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    app.config.from_object(importlib.import_module(settings_module))
    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    if app.config.get('DEBUG'):
        log.info('settings=%s db=%s', settings_module, app.config.get('SQLALCHEMY_DATABASE_URI', '').split('@')[-1])

    db.init_app(app)
    login_manager.init_app(app)
    limiter.init_app(app)

    app.extensions[CHAT_CLIENT_KEY] = ChatClient.from_config(app.config)

    with app.app_context():
        # Registers every table on db.metadata
        from opsdesk import models  # noqa: F401
        from opsdesk.models.user import User
        from opsdesk.services.user_service import AuthService

        @login_manager.user_loader
        def load_user(user_id):
            user = db.session.get(User, int(user_id))
            return user if user is not None and user.is_active else None

        @login_manager.unauthorized_handler
        def unauthorized():
            return jsonify({'error': 'Unauthorized'}), 401

        @app.before_request
        def refresh_last_active():
            if current_user.is_authenticated:
                AuthService.touch_last_active(current_user)

        from opsdesk.controllers import register_blueprints
        register_blueprints(app)
        register_error_handlers(app)

        if app.config.get('AUTO_INIT_DB'):
            db.create_all()
        if app.config.get('AUTO_SEED_DB'):
            from opsdesk.bootstrap import ensure_demo_users
            ensure_demo_users()

    return app
