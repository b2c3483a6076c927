import os
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

DEFAULT_DB = f"sqlite:///{os.path.join(BASE_DIR, 'rh_manager.db')}"


def _as_bool(value, default=False):
    if value is None:
        return default
    return str(value).strip().lower() in ("1", "true", "yes", "on")


class Config:
    # JWT_SECRET must come from the environment, never from the code
    SECRET_KEY = os.getenv("JWT_SECRET")
    JWT_EXPIRES_HOURS = int(os.getenv("JWT_EXPIRES_HOURS", 24))
    RESET_TOKEN_MINUTES = int(os.getenv("RESET_TOKEN_MINUTES", 15))

    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", DEFAULT_DB)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    STORAGE_FOLDER = os.getenv("STORAGE_FOLDER", os.path.join(BASE_DIR, "storage"))
    DOCUMENT_TEMPLATE_FOLDER = os.getenv(
        "DOCUMENT_TEMPLATE_FOLDER", os.path.join(BASE_DIR, "templates", "documents")
    )
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_UPLOAD_MB", 20)) * 1024 * 1024

    # SMTP relay
    MAIL_SERVER = os.getenv("MAIL_SERVER", "smtp.gmail.com")
    MAIL_PORT = int(os.getenv("MAIL_PORT", 587))
    MAIL_USERNAME = os.getenv("MAIL_USERNAME")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
    MAIL_USE_TLS = _as_bool(os.getenv("MAIL_USE_TLS"), True)
    MAIL_SENDER = os.getenv("MAIL_SENDER") or os.getenv("MAIL_USERNAME")

    BACKOFFICE_EMAIL = os.getenv("BACKOFFICE_EMAIL")
    HR_ALERT_EMAIL = os.getenv("HR_ALERT_EMAIL")

    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
    CORS_ORIGINS = [
        o.strip()
        for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
        if o.strip()
    ]

    CONTRACT_ALERTS_ENABLED = _as_bool(os.getenv("CONTRACT_ALERTS_ENABLED"), True)
    CONTRACT_ALERTS_INTERVAL_SEC = int(os.getenv("CONTRACT_ALERTS_INTERVAL_SEC", 86400))

    PAYSLIP_MATRICULE_PATTERN = os.getenv(
        "PAYSLIP_MATRICULE_PATTERN", r"Matricule\s*[:\-]?\s*([A-Z0-9\-]+)"
    )

    COMPANY_NAME = os.getenv("COMPANY_NAME", "RH Manager")
    COMPANY_ADDRESS = os.getenv("COMPANY_ADDRESS", "")
    COMPANY_CITY = os.getenv("COMPANY_CITY", "Tunis")

    LOG_FOLDER = os.getenv("LOG_FOLDER", os.path.join(BASE_DIR, "logs"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
