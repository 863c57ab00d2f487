"""
Grid Mask Annotator - Mask Store Routes
---------------------------------------
POST /save and GET /check, the two endpoints the annotation client talks
to, plus GET /masks/<folder>.png to fetch the latest saved mask.
"""

import io
import logging

from flask import Blueprint, current_app, jsonify, request, send_file

from backend.errors import InvalidFolderName, MaskPayloadError, MaskStoreError

logger = logging.getLogger(__name__)

bp = Blueprint("masks", __name__, url_prefix="")


def register_mask_routes(app):
    app.register_blueprint(bp)


def _text(body, status):
    return body, status, {"Content-Type": "text/plain; charset=utf-8"}


@bp.route("/save", methods=["POST"])
def save():
    """Store a base64 PNG data URL as <masks>/<folderName>.png."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _text("Request body must be JSON", 400)
    image = data.get("image")
    folder_name = data.get("folderName")
    if not image or folder_name is None:
        return _text("Missing image or folderName", 400)

    try:
        current_app.mask_store.save_data_url(str(folder_name), image)
    except (InvalidFolderName, MaskPayloadError) as e:
        return _text(str(e), 400)
    except MaskStoreError as e:
        logger.error("Error saving the image: %s", e)
        return _text("Error saving the image", 500)
    return _text("Image saved successfully", 200)


@bp.route("/check")
def check():
    """Report whether a mask exists for folderName. Always 200."""
    folder_name = request.args.get("folderName", "")
    return jsonify(exists=current_app.mask_store.exists(folder_name))


@bp.route("/masks/<folder_name>.png")
def get_mask(folder_name):
    try:
        data = current_app.mask_store.load(folder_name)
    except InvalidFolderName as e:
        return jsonify(error=str(e)), 400
    except FileNotFoundError:
        return jsonify(error=f"No mask saved for {folder_name}"), 404
    except MaskStoreError as e:
        return jsonify(error=str(e)), 500
    return send_file(io.BytesIO(data), mimetype="image/png")
