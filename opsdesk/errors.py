# File: opsdesk/errors.py
import logging
import time

from flask import current_app, jsonify
from flask_limiter import RateLimitExceeded
from werkzeug.exceptions import HTTPException

from opsdesk.core.exceptions import DomainError
from opsdesk.extensions import db, limiter

log = logging.getLogger(__name__)


def _retry_after():
    current = limiter.current_limit
    if current is None:
        return int(current_app.config.get('CHAT_RATE_WINDOW_SECONDS', 60))
    return max(int(current.reset_at - time.time()), 0) + 1


def register_error_handlers(app):
    @app.errorhandler(DomainError)
    def handle_domain_error(exc):
        db.session.rollback()
        response = jsonify({'error': str(exc)})
        response.status_code = exc.status_code
        return response

    @app.errorhandler(RateLimitExceeded)
    def handle_rate_limited(exc):
        log.info('Rate limit hit: %s', exc.description)
        response = jsonify({'error': 'Too many requests. Please slow down.'})
        response.status_code = 429
        response.headers['Retry-After'] = str(_retry_after())
        return response

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return jsonify({'error': exc.description or exc.name}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc):
        db.session.rollback()
        log.exception('Unhandled error: %s', exc)
        return jsonify({'error': 'Internal server error'}), 500
