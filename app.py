import sys
import logging

from flask import Flask, current_app, jsonify, request, send_from_directory
from sqlalchemy.exc import SQLAlchemyError

import auth
from config import Config
from entities import (
    POSTS, CASINOS, GAMES, GLOBAL_SLOTS, POKER_SITES, CASINO_CARDS, BEST_CASINOS,
    create_record, list_records, update_record, delete_record,
)
from errors import NotFoundError, StoreError, ValidationError, register_error_handlers
from models import db, POST_CATEGORIES
from storage import UploadStore

# (schema, create, list, update, delete); update rules without <record_id> take the id from the body
ENTITY_ROUTES = [
    (POSTS, "/api/create-post", "/api/posts",
     "/api/update-post/<record_id>", "/api/delete-post/<record_id>"),
    (CASINOS, "/api/create-casino", "/api/casino-list",
     "/api/update-casino", "/api/delete-casino/<record_id>"),
    (GAMES, "/api/create-game", "/api/games",
     "/api/update-game/<record_id>", "/api/delete-game/<record_id>"),
    (GLOBAL_SLOTS, "/api/create-global-slot", "/api/global-slots",
     "/api/update-global-slot/<record_id>", "/api/delete-global-slot/<record_id>"),
    (POKER_SITES, "/api/create-poker-site", "/api/poker-sites",
     "/api/update-poker-site/<record_id>", "/api/delete-poker-site/<record_id>"),
    (CASINO_CARDS, "/api/add-casino-card", "/api/casino-cards",
     "/api/update-casino-card/<record_id>", "/api/delete-casino-card/<record_id>"),
    (BEST_CASINOS, "/api/best-casino", "/api/best-casino",
     "/api/update-best-casino/<record_id>", "/api/delete-best-casino/<record_id>"),
]


# ===== Request helpers =====
def request_data():
    """JSON body or form fields, whichever the client sent."""
    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    return request.form


def upload_store() -> UploadStore:
    return current_app.extensions["upload_store"]


def store_failure(action, schema):
    db.session.rollback()
    current_app.logger.exception("Error %s %s", action, schema.name)
    return StoreError(f"Server error while {action} {schema.label.lower()}.")


# ===== Entity CRUD routes =====
def register_entity_routes(app, schema, create_rule, list_rule, update_rule, delete_rule):
    def create_view():
        upload = request.files.get(schema.asset) if schema.asset else None
        try:
            record_id = create_record(schema, request_data(), upload, upload_store())
        except (SQLAlchemyError, OSError):
            raise store_failure("saving", schema)
        return jsonify({"message": f"{schema.label} created successfully!", "id": record_id}), 201

    def list_view():
        try:
            rows = list_records(schema)
        except SQLAlchemyError:
            raise store_failure("fetching", schema)
        return jsonify(rows)

    def update_view(record_id=None):
        data = request_data()
        if record_id is None:
            record_id = data.get("id")
            if not record_id:
                raise ValidationError(f"{schema.label} ID is required for updating.")
        upload = request.files.get(schema.asset) if schema.asset else None
        try:
            update_record(schema, record_id, data, upload, upload_store())
        except (SQLAlchemyError, OSError):
            raise store_failure("updating", schema)
        return jsonify({"message": f"{schema.label} updated successfully!"}), 200

    def delete_view(record_id):
        try:
            delete_record(schema, record_id, upload_store())
        except SQLAlchemyError:
            raise store_failure("deleting", schema)
        return jsonify({"message": f"{schema.label} deleted successfully."}), 200

    app.add_url_rule(create_rule, f"create_{schema.name}", create_view, methods=["POST"])
    app.add_url_rule(list_rule, f"list_{schema.name}", list_view, methods=["GET"])
    app.add_url_rule(update_rule, f"update_{schema.name}", update_view, methods=["POST"])
    app.add_url_rule(delete_rule, f"delete_{schema.name}", delete_view, methods=["DELETE"])


def register_routes(app):
    for route in ENTITY_ROUTES:
        register_entity_routes(app, *route)

    @app.route("/api/posts/<alias>")
    def posts_by_category(alias):
        category = POST_CATEGORIES.get(alias)
        if category is None:
            raise NotFoundError("Unknown post category.")
        try:
            rows = list_records(POSTS, category=category)
        except SQLAlchemyError:
            raise store_failure("fetching", POSTS)
        return jsonify(rows)

    @app.route("/api/signup", methods=["POST"])
    def signup():
        data = request_data()
        try:
            user_id = auth.signup(data.get("username"), data.get("email"), data.get("password"))
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception("Error during signup")
            raise StoreError("Server error. Please try again later.")
        return jsonify({"message": "Signup successful!", "id": user_id}), 201

    @app.route("/api/login", methods=["POST"])
    def login():
        data = request_data()
        try:
            auth.login(data.get("username"), data.get("password"))
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception("Error during login")
            raise StoreError("Server error. Please try again later.")
        return jsonify({"message": "Login successful"}), 200

    # Serve files saved under UPLOAD_FOLDER as /uploads/<file>
    @app.route("/uploads/<path:filename>")
    def uploaded_file(filename):
        return send_from_directory(app.config["UPLOAD_FOLDER"], filename)


# ===== App factory =====
def configure_logging(app):
    level = app.config.get("LOG_LEVEL", "INFO")
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.logger.setLevel(level)


def create_app(config_class=Config, **overrides):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.config.update(overrides)
    configure_logging(app)

    db.init_app(app)
    app.extensions["upload_store"] = UploadStore(app.config["UPLOAD_FOLDER"])

    register_error_handlers(app)
    register_routes(app)

    # Fail fast: the process is useless without its database
    try:
        with app.app_context():
            db.create_all()
    except SQLAlchemyError as e:
        app.logger.critical("Database connection failed: %s", e)
        sys.exit(1)

    app.logger.info("Connected to database, uploads in %s", app.config["UPLOAD_FOLDER"])
    return app


# Local dev entrypoint (gunicorn uses wsgi:app)
if __name__ == "__main__":
    create_app().run(debug=True, host="127.0.0.1", port=3000)
