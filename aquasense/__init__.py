# aquasense/__init__.py

# =====================================================================================
# 1. Environment variables (loaded first)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. Module imports
# =====================================================================================
import os
import logging
from typing import Any, Dict, Optional

from flask import Flask, jsonify
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

# - Config / core
from aquasense.core.config import config_by_name, LOG_FORMAT
from aquasense.core.errors import AquaSenseError, TransientNetworkError
from aquasense.core.firebase import init_firebase
from aquasense.core.security import init_jwt

# - API blueprints
from aquasense.api.auth.routes import auth_bp
from aquasense.api.users.routes import users_bp
from aquasense.api.schedules.routes import schedules_bp
from aquasense.api.feeding_logs.routes import feeding_logs_bp
from aquasense.api.mortality.routes import mortality_bp
from aquasense.api.reports.routes import reports_bp
from aquasense.api.admin.routes import admin_bp
from aquasense.api.superadmin.routes import superadmin_bp
from aquasense.api.cron.routes import cron_bp

# - Services
from aquasense.services.firestore_service import FirestoreRepository
from aquasense.services.feeder_service import FeederService
from aquasense.services.export_service import ExportService
from aquasense.api.auth.services import AuthService
from aquasense.api.users.services import UserService
from aquasense.api.schedules.services import ScheduleService
from aquasense.api.feeding_logs.services import FeedingLogService
from aquasense.api.mortality.services import MortalityService
from aquasense.api.reports.services import ReportService
from aquasense.api.admin.services import AdminService
from aquasense.runtime.runner import Runtime


def create_app(config_name: Optional[str] = None, services: Optional[Dict[str, Any]] = None):
    """
    Flask application factory.

    `services` may provide 'repo', 'feeder' and 'firebase_auth'; when it does,
    Firebase is not initialized (tests run against in-memory fakes).
    """
    # =====================================================================================
    # 3. Flask app and base config
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. External services
    # =====================================================================================
    injected = dict(services or {})
    if 'repo' not in injected:
        init_firebase(app.config)

    # =====================================================================================
    # 5. Service instances stored on 'app.services' (dependency injection)
    # =====================================================================================
    app.services = {}

    # 5-1. Shared services the domain services are built on
    try:
        app.services['repo'] = injected.get('repo') or FirestoreRepository(
            poll_interval=app.config['REFRESH_FALLBACK_SECONDS'])
        logging.info("Firestore repository initialized successfully")
    except Exception as e:
        logging.error(f"Failed to initialize Firestore repository: {e}")
        raise

    app.services['feeder'] = injected.get('feeder') or FeederService()
    app.services['exports'] = ExportService()
    repo = app.services['repo']
    firebase_auth_client = injected.get('firebase_auth')

    # 5-2. Domain services
    app.services['auth'] = AuthService(repo, firebase_auth_client)
    app.services['users'] = UserService(repo, firebase_auth_client)
    app.services['schedules'] = ScheduleService(repo)
    app.services['feeding_logs'] = FeedingLogService(repo)
    app.services['mortality'] = MortalityService(repo)
    app.services['reports'] = ReportService(repo)
    app.services['admin'] = AdminService(
        user_service=app.services['users'],
        schedule_service=app.services['schedules'],
        report_service=app.services['reports']
    )

    # 5-3. Runtime passes, triggered through /api/cron
    app.services['runtime'] = Runtime(
        repo=repo,
        feeder=app.services['feeder'],
        tick_seconds=app.config['RUNTIME_TICK_SECONDS'],
        sample_interval_seconds=app.config['SAMPLE_INTERVAL_SECONDS']
    )

    init_jwt(app, app.services['auth'])

    # =====================================================================================
    # 6. Blueprints
    # =====================================================================================
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(users_bp, url_prefix='/api/users')

    # - per-user dashboard data
    app.register_blueprint(schedules_bp, url_prefix='/api/users/<string:uid>/schedules')
    app.register_blueprint(feeding_logs_bp, url_prefix='/api/users/<string:uid>/feeding-logs')
    app.register_blueprint(mortality_bp, url_prefix='/api/users/<string:uid>/mortality')
    app.register_blueprint(reports_bp, url_prefix='/api/users/<string:uid>/reports')

    # - role dashboards and cron
    app.register_blueprint(admin_bp, url_prefix='/api/admin')
    app.register_blueprint(superadmin_bp, url_prefix='/api/superadmin')
    app.register_blueprint(cron_bp, url_prefix='/api/cron')

    # =====================================================================================
    # 7. Global error handlers
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(AquaSenseError)
    def handle_domain_error(err):
        response = err.to_dict()
        headers = {}
        if isinstance(err, TransientNetworkError):
            # Dashboards switch to a periodic refresh at this interval.
            retry_after = app.config['REFRESH_FALLBACK_SECONDS']
            response['retry_after'] = retry_after
            headers['Retry-After'] = str(retry_after)
        if err.status_code >= 500:
            logging.error(f"{err.error_code}: {err.message}")
        return jsonify(response), err.status_code, headers

    @app.errorhandler(HTTPException)
    def handle_http_exception(err):
        response = {"error_code": err.name.upper().replace(' ', '_'), "message": err.description}
        return jsonify(response), err.code

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "An unexpected server error occurred."}
        return jsonify(response), 500

    # =====================================================================================
    # 8. Logging
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
