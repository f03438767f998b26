# File: opsdesk/controllers/__init__.py
from opsdesk.controllers.admin import admin_bp
from opsdesk.controllers.ai import ai_bp
from opsdesk.controllers.announcements import announcements_bp
from opsdesk.controllers.attendance import attendance_bp
from opsdesk.controllers.auth import auth_bp
from opsdesk.controllers.banks import banks_bp
from opsdesk.controllers.calendar import calendar_bp
from opsdesk.controllers.invoices import invoices_bp
from opsdesk.controllers.leaves import leaves_bp
from opsdesk.controllers.meetings import meetings_bp
from opsdesk.controllers.messages import messages_bp
from opsdesk.controllers.pages import pages_bp
from opsdesk.controllers.payroll import payroll_bp
from opsdesk.controllers.projects import projects_bp
from opsdesk.controllers.tasks import tasks_bp
from opsdesk.controllers.users import users_bp

BLUEPRINTS = (
    auth_bp,
    users_bp,
    tasks_bp,
    attendance_bp,
    leaves_bp,
    invoices_bp,
    meetings_bp,
    messages_bp,
    pages_bp,
    calendar_bp,
    banks_bp,
    payroll_bp,
    projects_bp,
    announcements_bp,
    admin_bp,
    ai_bp,
)


def register_blueprints(app):
    for bp in BLUEPRINTS:
        app.register_blueprint(bp)
