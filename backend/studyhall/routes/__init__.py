from .auth import auth_bp
from .base_route import base_bp
from .attendance import attendance_bp
from .dashboard import dashboard_bp
from .exports import exports_bp
from .broadcasts import broadcasts_bp
from .pre_absences import pre_absences_bp
from .schedules import schedules_bp
from .notices import notices_bp
from .bug_reports import bug_reports_bp
from .students import students_bp

def register_routes(app):
    app.register_blueprint(base_bp)
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(attendance_bp, url_prefix='/zones')
    app.register_blueprint(dashboard_bp, url_prefix='/dashboard')
    app.register_blueprint(exports_bp, url_prefix='/exports')
    app.register_blueprint(broadcasts_bp, url_prefix='/broadcasts')
    app.register_blueprint(pre_absences_bp, url_prefix='/pre-absences')
    app.register_blueprint(schedules_bp, url_prefix='/schedules')
    app.register_blueprint(notices_bp, url_prefix='/notices')
    app.register_blueprint(bug_reports_bp, url_prefix='/bug-reports')
    app.register_blueprint(students_bp, url_prefix='/students')
