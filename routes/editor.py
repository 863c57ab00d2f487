"""
Grid Mask Annotator - Editor Routes
-----------------------------------
JSON API driving the annotation session: loading a sample directory,
moving between samples, feeding pointer events to the grid editor and
saving the result through the mask store.
"""

import io
import logging
import math
import os

from flask import Blueprint, current_app, jsonify, request, send_file
from PIL import Image

from backend import editor
from backend.errors import MaskPayloadError, MaskStoreError, SampleNotFound
from backend.rasterizer import encode_png, overlay_on_scene, rasterize
from backend.samples import IMAGE_KINDS, SCENE, find_sample_files, is_sample_name, read_image

logger = logging.getLogger(__name__)

bp = Blueprint("editor", __name__, url_prefix="/api")


def register_editor_routes(app):
    app.register_blueprint(bp)


def _session():
    return current_app.session_manager


def _body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _state_response(state):
    return jsonify(success=True, editor=editor.to_dict(state))


def _apply(handler, *args):
    try:
        state = _session().apply(handler, *args)
    except ValueError as e:
        return jsonify(success=False, error=str(e)), 400
    return _state_response(state)


def _pointer():
    data = _body()
    try:
        x, y = float(data["x"]), float(data["y"])
    except (KeyError, TypeError, ValueError):
        return None
    if not (math.isfinite(x) and math.isfinite(y)):
        return None
    return x, y


# ------------------------------------------------------
# Samples
# ------------------------------------------------------
@bp.route("/samples")
def samples():
    return jsonify(_session().snapshot())


@bp.route("/samples/load", methods=["POST"])
def samples_load():
    """Scan a sample directory and open its first folder."""
    root = str(_body().get("root") or "").strip()
    if not root:
        return jsonify(success=False, error="Sample directory is required"), 400
    try:
        snapshot = _session().load_root(root)
    except FileNotFoundError as e:
        return jsonify(success=False, error=str(e)), 404
    return jsonify(success=True, **snapshot)


@bp.route("/samples/next", methods=["POST"])
def samples_next():
    try:
        return jsonify(success=True, **_session().next_sample())
    except LookupError as e:
        return jsonify(success=False, error=str(e)), 400


@bp.route("/samples/previous", methods=["POST"])
def samples_previous():
    try:
        return jsonify(success=True, **_session().previous_sample())
    except LookupError as e:
        return jsonify(success=False, error=str(e)), 400


@bp.route("/samples/select", methods=["POST"])
def samples_select():
    folder_name = str(_body().get("folderName", ""))
    try:
        return jsonify(success=True, **_session().select_sample(folder_name))
    except SampleNotFound as e:
        return jsonify(success=False, error=str(e)), 404


@bp.route("/samples/<folder_name>/<kind>.png")
def sample_image(folder_name, kind):
    """Serve one of the sample's images (scene, original_scene, query_object, key)."""
    if kind not in IMAGE_KINDS:
        return jsonify(error=f"Unknown image kind: {kind}"), 404
    root = _session().get("root")
    if not root:
        return jsonify(error="No sample directory loaded"), 400
    folder = os.path.join(root, folder_name)
    if not is_sample_name(folder_name) or not os.path.isdir(folder):
        return jsonify(error=str(SampleNotFound(folder_name))), 404
    path = find_sample_files(folder)[kind]
    if not path:
        return jsonify(error=f"{kind}.png not found in sample {folder_name}"), 404
    return send_file(path, mimetype="image/png")


# ------------------------------------------------------
# Editor
# ------------------------------------------------------
@bp.route("/editor/state")
def editor_state():
    return _state_response(_session().state)


@bp.route("/editor/mode", methods=["POST"])
def editor_mode():
    return _apply(editor.set_mode, _body().get("mode"))


@bp.route("/editor/interaction", methods=["POST"])
def editor_interaction():
    data = _body()
    return _apply(editor.configure_interaction, data.get("interaction"), data.get("interpolate"))


@bp.route("/editor/display", methods=["POST"])
def editor_display():
    data = _body()
    try:
        width, height = float(data["width"]), float(data["height"])
    except (KeyError, TypeError, ValueError):
        return jsonify(success=False, error="width and height are required"), 400
    return _apply(editor.set_display_size, width, height)


@bp.route("/editor/pointer_down", methods=["POST"])
def editor_pointer_down():
    pos = _pointer()
    if pos is None:
        return jsonify(success=False, error="x and y are required"), 400
    return _apply(editor.pointer_down, *pos)


@bp.route("/editor/pointer_move", methods=["POST"])
def editor_pointer_move():
    pos = _pointer()
    if pos is None:
        return jsonify(success=False, error="x and y are required"), 400
    return _apply(editor.pointer_move, *pos)


@bp.route("/editor/pointer_up", methods=["POST"])
def editor_pointer_up():
    return _apply(editor.pointer_up)


@bp.route("/editor/confirm", methods=["POST"])
def editor_confirm():
    return _apply(editor.confirm_rect)


@bp.route("/editor/clear_proposed", methods=["POST"])
def editor_clear_proposed():
    return _apply(editor.clear_proposed_rect)


@bp.route("/editor/clear", methods=["POST"])
def editor_clear():
    return _apply(editor.clear_all)


@bp.route("/editor/save", methods=["POST"])
def editor_save():
    """Rasterize the current cells and store them for the current sample."""
    try:
        result = _session().save_current()
    except LookupError as e:
        return jsonify(success=False, error=str(e)), 400
    except MaskStoreError as e:
        return jsonify(success=False, error=str(e), exists=False), 500
    return jsonify(success=True, **result)


@bp.route("/editor/reload", methods=["POST"])
def editor_reload():
    """Load the saved mask of the current sample back into the editor."""
    try:
        state = _session().reload_current()
    except FileNotFoundError as e:
        return jsonify(success=False, error=str(e)), 404
    except LookupError as e:
        return jsonify(success=False, error=str(e)), 400
    except (MaskPayloadError, MaskStoreError) as e:
        return jsonify(success=False, error=str(e)), 500
    return _state_response(state)


@bp.route("/editor/mask.png")
def editor_mask():
    """The mask exactly as it would be saved right now."""
    state = _session().state
    png = encode_png(rasterize(state.cells, state.grid_size[0], state.grid_size[1]))
    return send_file(io.BytesIO(png), mimetype="image/png")


@bp.route("/editor/preview.png")
def editor_preview():
    """Scene image with the current cells blended over it."""
    session = _session()
    sample = session.current_sample
    path = sample.image_path(SCENE) if sample else None
    if not path:
        return jsonify(error="No scene image for the current sample"), 404
    try:
        scene = read_image(path)
        alpha = float(request.args.get("alpha", 0.5))
    except ValueError as e:
        return jsonify(error=str(e)), 400
    state = session.state
    blended = overlay_on_scene(scene, state.cells, alpha=alpha,
                               grid_width=state.grid_size[0], grid_height=state.grid_size[1])
    bio = io.BytesIO()
    Image.fromarray(blended).save(bio, format="PNG")
    bio.seek(0)
    return send_file(bio, mimetype="image/png")
