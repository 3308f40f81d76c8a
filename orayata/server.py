import logging
import os

from flask import Flask
from flask_cors import CORS
from dotenv import load_dotenv

from orayata.routes.sources_api import sources_bp

load_dotenv()


def create_app(pipeline=None) -> Flask:
    """
    Build the Flask app.

    Args:
        pipeline: Optional SourcePipeline to serve instead of the shared one
    """
    app = Flask(__name__)

    app.config["SECRET_KEY"] = os.getenv("SECRET_KEY", "change-me")
    if pipeline is not None:
        app.config["SOURCE_PIPELINE"] = pipeline

    CORS(app, supports_credentials=True)

    # Register blueprints
    app.register_blueprint(sources_bp)

    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_app().run(host="127.0.0.1", port=int(os.getenv("PORT", "5055")))
