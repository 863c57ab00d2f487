"""
Pytest fixtures for the Grid Mask Annotator test suite.
"""

import json

import numpy as np
import pytest
from PIL import Image

from app import create_app


def _write_png(path, size=(64, 48), color=(200, 120, 40)):
    arr = np.zeros((size[1], size[0], 3), dtype=np.uint8)
    arr[:, :] = color
    Image.fromarray(arr).save(path)


def make_sample(root, name, info_name="mug", with_key=False, skip=()):
    """Create a sample folder with the expected files, minus any listed in skip."""
    folder = root / name
    folder.mkdir()
    if "scene.png" not in skip:
        _write_png(folder / "scene.png", size=(128, 128))
    if "original_scene.png" not in skip:
        _write_png(folder / "original_scene.png", size=(128, 128), color=(10, 10, 10))
    if "query_object.png" not in skip:
        _write_png(folder / "query_object.png", size=(3, 5))
    if with_key:
        _write_png(folder / "key.png", size=(16, 16))
    if "info.json" not in skip:
        (folder / "info.json").write_text(json.dumps({"name": info_name, "extra": 1}))
    return folder


@pytest.fixture
def sample_root(tmp_path):
    root = tmp_path / "samples"
    root.mkdir()
    make_sample(root, "10", info_name="bowl")
    make_sample(root, "2", info_name="mug", with_key=True)
    make_sample(root, "3", info_name="cup")
    (root / "notes").mkdir()
    (root / "readme.txt").write_text("not a sample")
    return root


@pytest.fixture
def masks_dir(tmp_path):
    return tmp_path / "masks"


@pytest.fixture
def app(masks_dir):
    app = create_app({
        "TESTING": True,
        "MASKS_DIR": str(masks_dir),
        "SAMPLES_DIR": None,
        "INTERPOLATE_STROKES": False,
    })
    return app


@pytest.fixture
def client(app):
    return app.test_client()
