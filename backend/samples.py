"""
Grid Mask Annotator - Sample Folders
------------------------------------
Discovers numerically named sample folders under a root directory and loads
the images and metadata of one sample.

Expected files per folder:
- scene.png, original_scene.png, query_object.png, info.json
- key.png (optional, only present in some datasets)

Missing files are logged and leave the matching field unset; they are never
raised as errors.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import cv2
import numpy as np

from backend.errors import SampleNotFound

logger = logging.getLogger(__name__)

SCENE = "scene"
ORIGINAL_SCENE = "original_scene"
QUERY_OBJECT = "query_object"
KEY = "key"
INFO = "info"

SAMPLE_FILES = {
    SCENE: "scene.png",
    ORIGINAL_SCENE: "original_scene.png",
    QUERY_OBJECT: "query_object.png",
    KEY: "key.png",
    INFO: "info.json",
}
REQUIRED_FILES = (SCENE, ORIGINAL_SCENE, QUERY_OBJECT, INFO)
IMAGE_KINDS = (SCENE, ORIGINAL_SCENE, QUERY_OBJECT, KEY)


def is_sample_name(name: str) -> bool:
    return name.isdigit() and name.isascii()


def list_sample_folders(root: str) -> List[str]:
    """Names of immediate subfolders of root that are pure digit strings, in numeric order."""
    if not os.path.isdir(root):
        raise FileNotFoundError(f"Sample directory not found: {root}")
    names = [
        name for name in os.listdir(root)
        if is_sample_name(name) and os.path.isdir(os.path.join(root, name))
    ]
    names.sort(key=lambda n: (int(n), n))
    logger.info("Found %d sample folders in %s", len(names), root)
    return names


def find_sample_files(folder: str) -> Dict[str, Optional[str]]:
    """Map each expected file kind to its path, or None when absent."""
    found: Dict[str, Optional[str]] = {}
    for kind, filename in SAMPLE_FILES.items():
        path = os.path.join(folder, filename)
        found[kind] = path if os.path.isfile(path) else None
    return found


def read_image(path: str) -> np.ndarray:
    """Read a PNG as RGB(A) uint8."""
    arr = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    if arr is None:
        raise ValueError(f"Failed to read image: {path}")
    if arr.ndim == 3 and arr.shape[2] == 4:
        arr = cv2.cvtColor(arr, cv2.COLOR_BGRA2RGBA)
    elif arr.ndim == 3:
        arr = cv2.cvtColor(arr, cv2.COLOR_BGR2RGB)
    return arr


def read_info_name(path: str) -> str:
    with open(path, "r", encoding="utf-8") as fh:
        info = json.load(fh)
    name = info.get("name", "") if isinstance(info, dict) else ""
    return name if isinstance(name, str) else str(name)


@dataclass
class Sample:
    """One annotation unit: its folder name, image files and info.json name."""
    folder_name: str
    path: str
    files: Dict[str, Optional[str]] = field(default_factory=dict)
    info_name: str = ""
    scene_size: Optional[Tuple[int, int]] = None
    query_object_size: Optional[Tuple[int, int]] = None

    @property
    def missing(self) -> List[str]:
        return [SAMPLE_FILES[k] for k in REQUIRED_FILES if not self.files.get(k)]

    @property
    def complete(self) -> bool:
        return not self.missing

    def image_path(self, kind: str) -> Optional[str]:
        if kind not in IMAGE_KINDS:
            raise ValueError(f"Unknown image kind: {kind!r}")
        return self.files.get(kind)

    def to_dict(self):
        return {
            "folderName": self.folder_name,
            "infoName": self.info_name,
            "images": {k: self.files.get(k) is not None for k in IMAGE_KINDS},
            "missing": self.missing,
            "sceneSize": list(self.scene_size) if self.scene_size else None,
            "queryObjectSize": list(self.query_object_size) if self.query_object_size else None,
        }


def _image_size(path: Optional[str]) -> Optional[Tuple[int, int]]:
    if not path:
        return None
    try:
        arr = read_image(path)
    except ValueError as e:
        logger.warning("%s", e)
        return None
    return arr.shape[1], arr.shape[0]


def load_sample(root: str, folder_name: str) -> Sample:
    folder = os.path.join(root, folder_name)
    if not is_sample_name(folder_name) or not os.path.isdir(folder):
        raise SampleNotFound(folder_name)

    files = find_sample_files(folder)
    sample = Sample(folder_name=folder_name, path=folder, files=files)
    if sample.missing:
        logger.warning("Sample %s is missing required files: %s",
                       folder_name, ", ".join(sample.missing))

    if files[INFO]:
        try:
            sample.info_name = read_info_name(files[INFO])
        except (OSError, ValueError) as e:
            logger.warning("Could not read %s: %s", files[INFO], e)

    sample.scene_size = _image_size(files[SCENE])
    sample.query_object_size = _image_size(files[QUERY_OBJECT])
    logger.debug("Loaded sample %s (%s)", folder_name, sample.info_name)
    return sample


class SampleNavigator:
    """Cursor over a list of sample folder names; next/previous wrap around."""

    def __init__(self, folders: List[str], index: int = 0):
        self.folders = list(folders)
        self.index = index if self.folders else 0

    def __len__(self) -> int:
        return len(self.folders)

    @property
    def current(self) -> Optional[str]:
        if not self.folders:
            return None
        return self.folders[self.index]

    def next(self) -> Optional[str]:
        if not self.folders:
            return None
        self.index = (self.index + 1) % len(self.folders)
        return self.current

    def previous(self) -> Optional[str]:
        if not self.folders:
            return None
        self.index = (self.index - 1 + len(self.folders)) % len(self.folders)
        return self.current

    def select(self, folder_name: str) -> str:
        if folder_name not in self.folders:
            raise SampleNotFound(folder_name)
        self.index = self.folders.index(folder_name)
        return folder_name
