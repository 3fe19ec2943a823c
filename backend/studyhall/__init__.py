from flask import Flask
from flask_cors import CORS
from .config import Config
from studyhall.extensions import db, jwt, limiter, migrate


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    db.init_app(app)
    jwt.init_app(app)
    CORS(app, origins=app.config["CORS_ORIGINS"], supports_credentials=True)
    limiter.init_app(app)
    migrate.init_app(app, db)

    from studyhall.services.accounts import is_token_revoked
    from studyhall.routes import register_routes
    register_routes(app)

    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        return is_token_revoked(jwt_payload["jti"])

    with app.app_context():
        db.create_all()

    return app
