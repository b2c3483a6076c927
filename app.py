import atexit
import logging
import os
from logging.handlers import RotatingFileHandler

import click
from flask import Flask, jsonify
from flask_cors import CORS
from pydantic import ValidationError as SchemaError
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from config import Config
from jobs.contract_alerts import ContractAlertWorker, run_contract_end_sweep
from models import db
from routes import BLUEPRINTS
from services.document_generator import DocumentGenerator
from services.notifications import NotificationService
from services.storage import LocalFileStorage
from utils.email_utils import SmtpMailer
from utils.errors import ApiError
from utils.responses import fail, from_error, ok
from utils.validators import pydantic_errors

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
UNIQUE_FIELDS = ("matricule", "cin", "email")


# ======================
# Logging
# ======================
def configure_logging(app):
    root = logging.getLogger()
    root.setLevel(app.config.get("LOG_LEVEL", "INFO"))
    formatter = logging.Formatter(LOG_FORMAT)

    if not any(getattr(h, "_rh_console", False) for h in root.handlers):
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        console._rh_console = True
        root.addHandler(console)

    if app.testing or any(isinstance(h, RotatingFileHandler) for h in root.handlers):
        return

    log_folder = app.config["LOG_FOLDER"]
    os.makedirs(log_folder, exist_ok=True)
    file_handler = RotatingFileHandler(
        os.path.join(log_folder, "rh_manager.log"),
        maxBytes=1_000_000,   # 1MB
        backupCount=5,
    )
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)


# ======================
# Errors
# ======================
def _conflicting_field(exc):
    message = str(getattr(exc, "orig", exc)).lower()
    if "unique" not in message and "duplicate" not in message:
        return None
    for field in UNIQUE_FIELDS:
        if field in message:
            return field
    return None


def register_error_handlers(app):

    @app.errorhandler(ApiError)
    def handle_api_error(e):
        if e.status_code >= 500:
            logger.error("%s %s", type(e).__name__, e.message)
        return from_error(e)

    @app.errorhandler(SchemaError)
    def handle_schema_error(e):
        return fail("Validation error", 400, errors={"fields": pydantic_errors(e)})

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(e):
        db.session.rollback()
        field = _conflicting_field(e)
        if field:
            return fail(f"{field} already exists", 400, errors={"field": field})
        logger.warning("Integrity error: %s", e.orig)
        return fail("Invalid data", 400)

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return fail(e.description or e.name, e.code)

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        db.session.rollback()
        logger.exception("Unhandled error")
        return fail("Internal server error", 500)


# ======================
# Application factory
# ======================
def create_app(test_config=None, mailer=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    if not app.config.get("SECRET_KEY") and not app.testing:
        raise RuntimeError("JWT_SECRET is not set; refusing to start")

    configure_logging(app)

    origins = list(app.config.get("CORS_ORIGINS") or [])
    if app.config.get("FRONTEND_URL") and app.config["FRONTEND_URL"] not in origins:
        origins.append(app.config["FRONTEND_URL"])
    CORS(app, resources={r"/*": {
        "origins": origins,
        "allow_headers": ["Content-Type", "Authorization"],
        "methods": ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    }})

    db.init_app(app)

    # Services reached through app.extensions (see services/__init__.py)
    if mailer is None:
        mailer = SmtpMailer.from_config(app.config)
    app.extensions["storage"] = LocalFileStorage(app.config["STORAGE_FOLDER"])
    app.extensions["notifier"] = NotificationService(
        mailer,
        backoffice_email=app.config.get("BACKOFFICE_EMAIL"),
        hr_alert_email=app.config.get("HR_ALERT_EMAIL"),
        frontend_url=app.config.get("FRONTEND_URL"),
    )
    app.extensions["document_generator"] = DocumentGenerator(
        app.config["DOCUMENT_TEMPLATE_FOLDER"],
        company_name=app.config.get("COMPANY_NAME", ""),
        company_address=app.config.get("COMPANY_ADDRESS", ""),
        company_city=app.config.get("COMPANY_CITY", ""),
    )

    for blueprint, prefix in BLUEPRINTS:
        app.register_blueprint(blueprint, url_prefix=prefix)
    register_error_handlers(app)

    @app.route("/")
    def home():
        return {
            "endpoints": {
                "auth": {
                    "login": "POST /api/auth/login",
                    "profile": "GET /api/auth/profile",
                    "forgot_password": "POST /api/auth/forgot-password",
                    "reset_password": "POST /api/auth/reset-password",
                },
                "employees": {
                    "list": "GET /api/employees",
                    "archives": "GET /api/employees/archives",
                    "search": "GET /api/employees/search?q=&statut=",
                    "get": "GET /api/employees/<id>",
                    "create": "POST /api/employees",
                    "update": "PUT /api/employees/<id>",
                    "archive": "PUT /api/employees/<id>/archive",
                },
                "demandes": {
                    "list": "GET /api/demandes",
                    "get": "GET /api/demandes/<id>",
                    "create": "POST /api/demandes",
                    "update": "PUT /api/demandes/<id>",
                    "status": "PUT /api/demandes/<id>/statut",
                    "approval": "PATCH /api/demandes/<id>/approval",
                    "delete": "DELETE /api/demandes/<id>",
                    "stats": "GET /api/demandes/stats/general",
                },
                "visa": {
                    "create_dossier": "POST /api/visa-dossiers",
                    "list_dossiers": "GET /api/visa-dossiers",
                    "get_dossier": "GET /api/visa-dossiers/<id>",
                    "dossier_status": "PATCH /api/visa-dossiers/<id>/status",
                    "dossier_pdf": "GET /api/visa-dossiers/<id>/dossier-pdf",
                    "upload_document": "POST /api/visa-documents/<id>/upload",
                    "patch_document": "PATCH /api/visa-documents/<id>",
                    "attestation_travail": "POST /api/attestation-travail",
                    "invitation": "POST /api/invitation-prise-en-charge",
                    "ordre_mission": "POST /api/ordre-mission",
                    "email_assurance": "POST /api/email/assurance",
                    "email_billet": "POST /api/email/billet",
                },
                "payslips": {
                    "distribute": "POST /api/payslips/distribute",
                    "list": "GET /api/payslips",
                },
                "files": "GET /files/<namespace>/<filename>",
            },
            "message": "RH Manager API",
            "version": "1.0.0",
        }

    @app.route("/api/health")
    def health():
        try:
            db.session.execute(text("SELECT 1"))
        except Exception:
            logger.exception("Health check failed")
            return jsonify({"success": False, "database": "down"}), 503
        return ok("OK", {"database": "up"})

    @app.cli.command("contract-alerts")
    def contract_alerts_command():
        """Run one contract-end sweep (for cron or another scheduler)."""
        sent = run_contract_end_sweep(app.extensions["notifier"])
        click.echo(f"{sent} contract-end alert(s) sent")

    with app.app_context():
        db.create_all()

    # Test apps are short-lived: no sweep thread, no exit hooks
    if app.testing:
        return app

    if app.config.get("CONTRACT_ALERTS_ENABLED"):
        worker = ContractAlertWorker(app, app.config.get("CONTRACT_ALERTS_INTERVAL_SEC", 86400))
        if worker.start():
            app.extensions["contract_alerts"] = worker
            atexit.register(worker.stop)

    def _shutdown():
        with app.app_context():
            db.engine.dispose()

    atexit.register(_shutdown)
    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=os.getenv("FLASK_DEBUG") == "1", port=int(os.getenv("PORT", 5000)))
