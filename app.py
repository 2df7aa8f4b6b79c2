import logging

import click
from flask import Flask
from flask_cors import CORS
from flask_jwt_extended import JWTManager

from config.settings import Config
from routes.auth import auth_bp
from routes.workspace_routes import workspace_bp
from routes.offer_routes import offer_bp
from routes.offer_context_routes import offer_context_bp
from routes.offer_file_routes import offer_file_bp
from routes.sales_report_routes import sales_report_bp
from routes.job_routes import job_bp
from services.reconcile_service import reconcile_stuck_records
from services.registry import EXTENSION_KEY, ServiceRegistry

logger = logging.getLogger(__name__)


def create_app(config_object=Config, services: ServiceRegistry = None) -> Flask:
    """Build the Flask app. `services` replaces the vendor clients (tests)."""
    logging.basicConfig(
        level=getattr(logging, config_object.LOG_LEVEL, logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    app = Flask(__name__)
    app.config.from_object(config_object)

    CORS(app,
         origins=app.config["CORS_ORIGINS"],
         methods=app.config["CORS_METHODS"],
         allow_headers=[
             "Content-Type",
             "Authorization",
             "X-Requested-With",
         ],
         supports_credentials=True
    )

    # Initialize JWT Manager
    JWTManager(app)

    app.extensions[EXTENSION_KEY] = services or ServiceRegistry(app.config)

    # Register Blueprints
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(workspace_bp, url_prefix='/workspaces')
    app.register_blueprint(offer_bp, url_prefix='/api')
    app.register_blueprint(offer_context_bp, url_prefix='/api')
    app.register_blueprint(offer_file_bp, url_prefix='/api')
    app.register_blueprint(sales_report_bp, url_prefix='/api')
    app.register_blueprint(job_bp, url_prefix='/jobs')

    @app.cli.command("reconcile-stuck")
    @click.option("--max-age", "max_age", type=int, default=None, help="Age in minutes before a record counts as stuck.")
    def reconcile_stuck_command(max_age):
        """Fail records left in a non-terminal status."""
        counts = reconcile_stuck_records(max_age or app.config["STUCK_RECORD_MAX_AGE_MINUTES"])
        click.echo(counts)

    return app


app = create_app()

if __name__ == '__main__':
    app.run(host='0.0.0.0', port=8000, debug=app.config["FLASK_DEBUG"])
