import os


class Config:
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False
    ENV = os.getenv("FLASK_ENV", "development")

    # the shop form posts small JSON bodies only
    MAX_CONTENT_LENGTH = 1 * 1024 * 1024

    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    RECEIPT_LIST_LIMIT = int(os.getenv("RECEIPT_LIST_LIMIT", "300"))
    LOG_LEVEL = os.getenv("STITCHBOOK_LOG_LEVEL", "INFO")

    @staticmethod
    def init_app(app):
        if app.config.get("SQLALCHEMY_DATABASE_URI"):
            return
        if not os.getenv("DATABASE_URL"):
            os.makedirs(app.instance_path, exist_ok=True)
            app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{os.path.join(app.instance_path, 'stitchbook.db')}"
        else:
            app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL")


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
