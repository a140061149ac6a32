import io
import logging

from flask import Blueprint, current_app, jsonify, request, send_file

from surveyport.converters.csv import SHEET_TYPES
from surveyport.converters.export import render_workbook
from surveyport.issues import ImportRejected, error
from surveyport.store import StoreCorruptError, StoreError
from surveyport.web.upload import stage_upload

logger = logging.getLogger(__name__)

imports_bp = Blueprint("imports", __name__)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _store_failure(exc: StoreError):
    code = "STORE902" if isinstance(exc, StoreCorruptError) else "STORE901"
    issue = error(code)
    logger.error("Store failure: %s", exc, exc_info=True)
    return jsonify({"error": issue.message, "code": code, "message": str(exc)}), 500


@imports_bp.route("/api/health")
def health():
    return jsonify({"status": "ok"})


@imports_bp.route("/api/import", methods=["POST"])
def import_file():
    """Import a Survey Master / Question Master workbook or text file."""
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        return jsonify(ImportRejected(error("IMPORT004")).to_dict()), 400

    overwrite = str(request.args.get("overwrite", "")).lower() == "true"
    sheet_type = request.args.get("sheetType") or "both"
    if sheet_type not in SHEET_TYPES:
        rejected = ImportRejected(error("IMPORT005", details={"sheetType": sheet_type}))
        return jsonify(rejected.to_dict()), 400

    service = current_app.config["SURVEYPORT_SERVICE"]
    staged = stage_upload(upload, current_app.config["SURVEYPORT_UPLOAD_DIR"])

    try:
        result = service.import_file(
            staged,
            filename=upload.filename,
            overwrite=overwrite,
            sheet_type=sheet_type,
        )
    except ImportRejected as e:
        return jsonify(e.to_dict()), 400
    except StoreError as e:
        return _store_failure(e)

    return jsonify(result.to_dict()), 201


@imports_bp.route("/api/export/<survey_id>")
def export_survey(survey_id):
    """Download one survey and its questions as a workbook."""
    store = current_app.config["SURVEYPORT_STORE"]
    try:
        survey = store.get_survey(survey_id)
        if survey is None:
            return jsonify({"error": "Survey not found"}), 404
        content = render_workbook(survey, store.get_questions(survey_id))
    except StoreError as e:
        return _store_failure(e)

    return send_file(
        io.BytesIO(content),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name=f"{survey_id}_dump.xlsx",
    )
