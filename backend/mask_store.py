"""
Grid Mask Annotator - Mask Store
--------------------------------
Flat-file store for saved masks: one <masks_dir>/<folder_name>.png per sample.

Writes overwrite any previous mask for the same name. There is no locking;
concurrent saves to one key race at the filesystem level and the last
writer wins.
"""

import logging
import os

from backend.errors import InvalidFolderName, MaskStoreError
from backend.rasterizer import decode_data_url

logger = logging.getLogger(__name__)

MASK_EXT = ".png"


def is_valid_folder_name(folder_name) -> bool:
    """A folder name must be usable as a single path component."""
    if not isinstance(folder_name, str) or not folder_name.strip():
        return False
    if folder_name in (".", "..") or "\x00" in folder_name:
        return False
    return not any(sep in folder_name for sep in ("/", "\\", os.sep))


class MaskStore:
    """Key-value blob store keyed by sample folder name."""

    def __init__(self, masks_dir: str):
        self.masks_dir = os.path.abspath(masks_dir)

    def path_for(self, folder_name: str) -> str:
        if not is_valid_folder_name(folder_name):
            raise InvalidFolderName(folder_name)
        return os.path.join(self.masks_dir, f"{folder_name}{MASK_EXT}")

    def save(self, folder_name: str, image_bytes: bytes) -> str:
        """Write mask bytes for folder_name, replacing any earlier mask. Returns the path."""
        path = self.path_for(folder_name)
        try:
            os.makedirs(self.masks_dir, exist_ok=True)
            with open(path, "wb") as fh:
                fh.write(image_bytes)
        except OSError as e:
            logger.error("Error saving mask for %s: %s", folder_name, e)
            raise MaskStoreError(f"Error saving the image: {e}") from e
        logger.info("Saved mask -> %s (%d bytes)", path, len(image_bytes))
        return path

    def save_data_url(self, folder_name: str, data_url: str) -> str:
        return self.save(folder_name, decode_data_url(data_url))

    def exists(self, folder_name) -> bool:
        """True when a mask has been saved for folder_name. Never raises."""
        if not is_valid_folder_name(folder_name):
            return False
        return os.path.isfile(self.path_for(folder_name))

    def load(self, folder_name: str) -> bytes:
        path = self.path_for(folder_name)
        if not os.path.isfile(path):
            raise FileNotFoundError(f"Mask not found: {path}")
        try:
            with open(path, "rb") as fh:
                return fh.read()
        except OSError as e:
            raise MaskStoreError(f"Error reading mask {path}: {e}") from e
