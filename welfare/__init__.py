import logging
import os

from flask import Flask, jsonify

from config import Config
from welfare.extensions import db, cors


def configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )
    logging.getLogger('welfare').setLevel(level)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    os.makedirs(app.instance_path, exist_ok=True)

    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    cors.init_app(
        app,
        resources={r'/api/*': {'origins': app.config['CORS_ORIGINS']}},
        supports_credentials=True
    )

    from welfare.auth import init_auth
    from welfare.errors import register_error_handlers
    from welfare.cli import register_cli

    init_auth(app)
    register_error_handlers(app)
    register_cli(app)

    # Register blueprints
    from welfare.routes.members import members_bp
    from welfare.routes.loans import loans_bp
    from welfare.routes.refunds import refunds_bp
    from welfare.routes.scholarships import scholarships_bp

    app.register_blueprint(members_bp)
    app.register_blueprint(loans_bp)
    app.register_blueprint(refunds_bp)
    app.register_blueprint(scholarships_bp)

    @app.route('/api/health')
    def health():
        return jsonify({'status': 'ok'})

    with app.app_context():
        db.create_all()

    app.logger.info('Welfare API initialised')
    return app
