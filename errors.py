from flask import jsonify


class ApiError(Exception):
    """Error carrying the HTTP status and the message shown to the caller."""

    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ValidationError(ApiError):
    status_code = 400


class UnauthorizedError(ApiError):
    status_code = 401


class NotFoundError(ApiError):
    status_code = 404


class ConflictError(ApiError):
    status_code = 409


class StoreError(ApiError):
    status_code = 500


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(err):
        return jsonify({"message": err.message}), err.status_code

    @app.errorhandler(404)
    def handle_not_found(err):
        return jsonify({"message": "Not found."}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(err):
        return jsonify({"message": "Method not allowed."}), 405

    @app.errorhandler(413)
    def handle_too_large(err):
        return jsonify({"message": "Uploaded file is too large."}), 413

    @app.errorhandler(500)
    def handle_server_error(err):
        # unhandled exceptions land here once Flask has logged them
        return jsonify({"message": "Server error. Please try again later."}), 500
