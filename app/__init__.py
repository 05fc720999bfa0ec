from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
import os
from dotenv import load_dotenv

load_dotenv()

db = SQLAlchemy()


def _env_bool(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in ('true', '1', 'yes')


def create_app(config_name='development'):
    app = Flask(__name__)

    # Config
    if config_name == 'testing':
        app.config['TESTING'] = True
        app.config['SQLALCHEMY_DATABASE_URI'] = 'sqlite:///:memory:'
    else:
        app.config['SQLALCHEMY_DATABASE_URI'] = os.getenv(
            'DATABASE_URL',
            'sqlite:///forum.db'
        )

    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'dev-secret')
    # Seconds, a duration like '30d', or 'never' for tokens without an exp claim
    app.config['JWT_EXPIRES_IN'] = os.getenv('JWT_EXPIRES_IN', 'never')
    app.config['CORS_ORIGINS'] = [
        origin.strip()
        for origin in os.getenv('CORS_ORIGINS', 'http://localhost:8080').split(',')
        if origin.strip()
    ]

    # Phone numbering plan
    app.config['PHONE_COUNTRY_CODE'] = os.getenv('PHONE_COUNTRY_CODE', '250')
    app.config['PHONE_TRUNK_PREFIX'] = os.getenv('PHONE_TRUNK_PREFIX', '0')
    app.config['PHONE_NATIONAL_LENGTH'] = int(os.getenv('PHONE_NATIONAL_LENGTH', 9))
    app.config['PHONE_MOBILE_PREFIXES'] = os.getenv('PHONE_MOBILE_PREFIXES', '7')
    app.config['PHONE_MIN_LENGTH'] = int(os.getenv('PHONE_MIN_LENGTH', 10))
    app.config['PHONE_MAX_LENGTH'] = int(os.getenv('PHONE_MAX_LENGTH', 15))
    app.config['PHONE_ALLOW_INTERNATIONAL'] = _env_bool('PHONE_ALLOW_INTERNATIONAL', True)

    # Registration policy
    app.config['IDENTIFIER_POLICY'] = os.getenv('IDENTIFIER_POLICY', 'either')
    app.config['PASSWORD_MIN_LENGTH'] = int(os.getenv('PASSWORD_MIN_LENGTH', 6))
    app.config['PASSWORD_MAX_LENGTH'] = int(os.getenv('PASSWORD_MAX_LENGTH', 128))
    app.config['NAME_MAX_LENGTH'] = int(os.getenv('NAME_MAX_LENGTH', 80))

    # Reject bad token and policy settings at startup
    from app.utils.auth import parse_token_lifetime
    from app.services.identity import IdentifierPolicy
    parse_token_lifetime(app.config['JWT_EXPIRES_IN'])
    IdentifierPolicy.from_config(app.config)

    app.logger.setLevel(os.getenv('LOG_LEVEL', 'INFO').upper())

    # Initialize extensions
    db.init_app(app)
    CORS(app, origins=app.config['CORS_ORIGINS'], supports_credentials=True)

    # Create tables with error handling
    with app.app_context():
        from app import models  # noqa: F401  (registers tables on db.metadata)
        try:
            db.create_all()
        except Exception as e:
            app.logger.warning(f"Could not create database tables: {e}")

    # Register routes
    from app.routes import register_routes
    register_routes(app)

    # Health check
    @app.route('/ping', methods=['GET'])
    def ping():
        return {'status': 'ok'}, 200

    return app
