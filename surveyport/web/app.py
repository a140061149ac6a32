"""
Web interface for surveyport.

A small Flask app exposing the import and export endpoints:
- POST /api/import            upload a workbook or text file
- GET  /api/export/<surveyId> download a survey as a workbook
- GET  /api/health
"""

from typing import Optional

from flask import Flask, jsonify, request

from surveyport.config import SurveyportConfig, load_config
from surveyport.importer import ImportService
from surveyport.store import JsonStore
from surveyport.web.blueprints import imports_bp


def create_app(config: Optional[SurveyportConfig] = None, store: Optional[JsonStore] = None) -> Flask:
    """
    Build the Flask application.

    Args:
        config: Settings; loaded from the working directory when omitted
        store: Store instance; opened from ``config.store_path`` when omitted
    """
    config = config or load_config()
    store = store or JsonStore(config.store_path)

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.max_content_length
    app.config["SURVEYPORT_CONFIG"] = config
    app.config["SURVEYPORT_STORE"] = store
    app.config["SURVEYPORT_SERVICE"] = ImportService(store, config)
    app.config["SURVEYPORT_UPLOAD_DIR"] = config.upload_dir

    app.register_blueprint(imports_bp)

    # All /api/* errors are JSON
    @app.errorhandler(404)
    def _404(e):
        if request.path.startswith("/api/"):
            return jsonify({"error": "not found", "path": request.path}), 404
        return e

    @app.errorhandler(413)
    def _413(e):
        return jsonify({"error": "payload too large"}), 413

    return app
