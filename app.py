import logging
import os

import click
from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from database import db
from errors import ApiError, InternalError

load_dotenv()

DEFAULT_DATABASE_URI = "sqlite:///projects.db"
DEFAULT_SECRET_KEY = "dev-secret-key-change-me-in-production"

# Initialize Flask app
app = Flask(__name__)
app.config["SQLALCHEMY_DATABASE_URI"] = os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URI)
app.config["SECRET_KEY"] = os.environ.get("SECRET_KEY", DEFAULT_SECRET_KEY)
app.config["JWT_SECRET_KEY"] = os.environ.get("JWT_SECRET_KEY") or app.config["SECRET_KEY"]
app.config["JWT_ALGORITHM"] = os.environ.get("JWT_ALGORITHM", "HS256")
app.config["JWT_EXPIRES_IN"] = int(os.environ.get("JWT_EXPIRES_IN", "86400"))

if app.config["SECRET_KEY"] == DEFAULT_SECRET_KEY:
    logging.warning("SECRET_KEY is not set, using the development default.")

db.init_app(app)

# Models import should be after initializing db
from models.project import Project  # noqa: E402,F401
from models.user import User  # noqa: E402,F401

from routes.auth import auth_bp  # noqa: E402
from routes.projects import projects_bp  # noqa: E402

app.register_blueprint(auth_bp)
app.register_blueprint(projects_bp)


# Error Handling
# ------------------------------
@app.errorhandler(ApiError)
def handle_api_error(error: ApiError):
    """Map the error taxonomy to a status code and a small JSON body."""
    return jsonify(error.to_dict()), error.status_code


@app.errorhandler(HTTPException)
def handle_http_exception(error: HTTPException):
    return jsonify({"error": error.description}), error.code


@app.errorhandler(Exception)
def handle_unexpected_error(error: Exception):
    logging.exception("Unhandled error while processing request")
    db.session.rollback()
    return handle_api_error(InternalError())


# Database
# ------------------------------
# Create the tables for a fresh database
# Useage:
# > flask --app app init-db
@app.cli.command("init-db")
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("Database initialized.")


# Application Execution
# ------------------------------
if __name__ == "__main__":
    app.run(debug=True)
