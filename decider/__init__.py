import logging

from dotenv import load_dotenv
from flask import Flask

from .config import Config
from .errors import register_error_handlers
from .extensions import db, migrate, jwt
from flasgger import Swagger
from .swagger_config import swagger_template
from .middleware.request_id import init_request_id
from .engine.clock import init_clock
from .engine.membership import init_participant_policy
from .cli import register_cli

load_dotenv()


def create_app(config_class=Config, clock=None, participant_policy=None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_class)
    logging.basicConfig(level=app.config.get("LOG_LEVEL", "INFO"))

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    Swagger(app, template=swagger_template(app))

    # Collaborators chosen at composition time
    init_clock(app, clock)
    init_participant_policy(app, participant_policy)

    # Middleware + errors
    init_request_id(app)
    register_error_handlers(app)

    # Blueprint imports
    from .api.decisions.routes import decisions_bp
    from .api.members.routes import members_bp
    from .api.constraints.routes import constraints_bp
    from .api.options.routes import options_bp
    from .api.voting.routes import voting_bp
    from .api.phase.routes import phase_bp
    from .api.results.routes import results_bp
    from .api.comments.routes import comments_bp

    # Blueprints
    app.register_blueprint(decisions_bp, url_prefix="/api/decisions")
    app.register_blueprint(members_bp, url_prefix="/api/decisions")
    app.register_blueprint(constraints_bp, url_prefix="/api/decisions")
    app.register_blueprint(options_bp, url_prefix="/api/decisions")
    app.register_blueprint(voting_bp, url_prefix="/api/decisions")
    app.register_blueprint(phase_bp, url_prefix="/api/decisions")
    app.register_blueprint(results_bp, url_prefix="/api/decisions")
    app.register_blueprint(comments_bp, url_prefix="/api/decisions")

    register_cli(app)

    # Health check
    @app.get("/health")
    def health():
        return {"status": "ok"}, 200

    return app
