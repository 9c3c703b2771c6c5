from flask import Flask, jsonify
from .config import Config
from .errors import register_error_handlers
from .extensions import db, cors, migrate
from .logging import configure_logging, get_logger

logger = get_logger(__name__)


def create_app(config_object=None, **overrides):
    app = Flask(__name__, instance_relative_config=True)

    config_object = config_object or Config
    app.config.from_object(config_object)
    app.config.update(overrides)
    config_object.init_app(app)

    configure_logging(app.config.get("LOG_LEVEL"))

    # Init extensions
    db.init_app(app)
    migrate.init_app(app, db)
    cors.init_app(app, resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    # Register blueprints
    from .receipt import bp as receipt_bp; app.register_blueprint(receipt_bp)

    register_error_handlers(app)

    from .cli import register_cli
    register_cli(app)

    @app.get("/")
    def health():
        return jsonify(ok=True, msg="API running")

    with app.app_context():
        from .services.numbering import ensure_counter
        db.create_all()
        ensure_counter()
        logger.debug("database ready: %s", db.engine.url.render_as_string(hide_password=True))

    return app
