import logging
import os

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_cors import CORS

import database
from services.care_ai_service import CareAI
from services.llm_service import build_llm
from services.notification_service import EmailSender
from services.severity_service import SeverityClassifier

logger = logging.getLogger(__name__)


def _env_flag(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def create_app(config=None, store=None, llm=None, classifier=None, emailer=None):
    load_dotenv()
    app = Flask(__name__)
    app.config['SECRET_KEY'] = os.getenv('SECRET_KEY', 'fallback-secret-key')
    app.config['MONGODB_URI'] = os.getenv('MONGODB_URI')
    app.config['MONGODB_DB_NAME'] = os.getenv('MONGODB_DB_NAME', 'healthwisehub')
    app.config['SESSION_COOKIE_SECURE'] = _env_flag('SESSION_COOKIE_SECURE')
    app.config['LLM_MODEL'] = os.getenv('LLM_MODEL', 'gemini-1.5-flash')
    app.config['GOOGLE_API_KEY'] = os.getenv('GOOGLE_API_KEY')
    app.config['SMTP_HOST'] = os.getenv('SMTP_HOST')
    app.config['SMTP_PORT'] = os.getenv('SMTP_PORT', '587')
    app.config['SMTP_USER'] = os.getenv('SMTP_USER')
    app.config['SMTP_PASS'] = os.getenv('SMTP_PASS')
    app.config['SMTP_FROM_EMAIL'] = os.getenv('SMTP_FROM_EMAIL')
    app.config['APP_URL'] = os.getenv('APP_URL', 'http://localhost:5000')
    app.config['LOG_LEVEL'] = os.getenv('LOG_LEVEL', 'INFO')
    if config:
        app.config.update(config)

    logging.basicConfig(
        level=getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    # CORS setup
    origins = os.getenv('CORS_ORIGINS', 'http://localhost:3000').split(',')
    CORS(app, origins=origins, supports_credentials=True)

    database.init_app(app, store)

    if llm is None and app.config.get('GOOGLE_API_KEY'):
        llm = build_llm(app.config)
    if llm is None:
        logger.warning("GOOGLE_API_KEY not set; AI features are disabled")
    app.extensions['services'] = {
        'classifier': classifier or SeverityClassifier(llm),
        'care_ai': CareAI(llm),
        'emailer': emailer or EmailSender.from_config(app.config),
    }

    from routes.admin_routes import admin_bp
    from routes.auth_routes import auth_bp, profile_bp
    from routes.chat_routes import chat_bp
    from routes.doctor_routes import doctor_bp
    from routes.patient_routes import patient_bp
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(profile_bp, url_prefix='/api/profile')
    app.register_blueprint(patient_bp, url_prefix='/api/patient')
    app.register_blueprint(doctor_bp, url_prefix='/api/doctor')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')
    app.register_blueprint(chat_bp, url_prefix='/api/chat')

    @app.route('/')
    def index():
        return jsonify({"message": "HealthWise Hub API running"}), 200

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host='0.0.0.0', port=5000, debug=False)
