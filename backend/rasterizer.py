"""
Grid Mask Annotator - Mask Rasterizer
-------------------------------------
Turns the filled-cell set into the persisted mask image and back.

The mask is exactly grid_width x grid_height pixels, one pixel per cell:
filled cells are opaque black, every other pixel is fully transparent.
It is a 1:1 encoding of cell state, never a resample of the display canvas.
"""

import base64
import binascii
import io
from typing import Iterable, Optional

import cv2
import numpy as np
from PIL import Image

from backend.errors import MaskPayloadError
from backend.grid import GRID_HEIGHT, GRID_WIDTH, Cell

DATA_URL_PREFIX = "data:image/png;base64,"

# Luminance + alpha channels
FILLED = (0, 255)
BACKGROUND = (0, 0)


def rasterize(cells: Iterable[Cell], grid_width: int = GRID_WIDTH,
              grid_height: int = GRID_HEIGHT) -> np.ndarray:
    """
    Paint filled cells into a (H, W, 2) uint8 luminance/alpha array.
    Cells outside the grid are ignored.
    """
    mask = np.zeros((grid_height, grid_width, 2), dtype=np.uint8)
    inside = [(x, y) for x, y in cells if 0 <= x < grid_width and 0 <= y < grid_height]
    if inside:
        pts = np.asarray(inside, dtype=np.intp)
        mask[pts[:, 1], pts[:, 0]] = FILLED
    return mask


def encode_png(mask: np.ndarray) -> bytes:
    """Encode a luminance/alpha (or plain grayscale) array as lossless PNG."""
    img = Image.fromarray(np.ascontiguousarray(mask, dtype=np.uint8))
    bio = io.BytesIO()
    img.save(bio, format="PNG")
    return bio.getvalue()


def mask_png(cells: Iterable[Cell], grid_width: int = GRID_WIDTH,
             grid_height: int = GRID_HEIGHT) -> bytes:
    return encode_png(rasterize(cells, grid_width, grid_height))


def read_mask(png_bytes: bytes) -> np.ndarray:
    """Decode stored mask bytes into a (H, W, 2) luminance/alpha array."""
    try:
        img = Image.open(io.BytesIO(png_bytes))
        return np.array(img.convert("LA"))
    except (OSError, ValueError) as e:
        raise MaskPayloadError(f"Could not decode mask image: {e}") from e


def to_data_url(png_bytes: bytes) -> str:
    return DATA_URL_PREFIX + base64.b64encode(png_bytes).decode()


def decode_data_url(data_url: str) -> bytes:
    """
    Strip the data:image/png;base64, prefix and decode the payload.
    A bare base64 string is accepted as well.
    """
    if not isinstance(data_url, str) or not data_url:
        raise MaskPayloadError("Mask payload must be a non-empty string")
    payload = data_url
    if payload.startswith(DATA_URL_PREFIX):
        payload = payload[len(DATA_URL_PREFIX):]
    elif payload.startswith("data:"):
        raise MaskPayloadError("Mask payload must be a PNG data URL")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MaskPayloadError(f"Invalid base64 mask payload: {e}") from e


def overlay_on_scene(scene: np.ndarray, cells: Iterable[Cell], alpha: float = 0.5,
                     grid_width: int = GRID_WIDTH, grid_height: int = GRID_HEIGHT,
                     color: Optional[tuple] = None) -> np.ndarray:
    """
    Preview of the mask over a scene image.

    The cell bitmap is scaled to the scene size with nearest-neighbour
    sampling and blended in; returns an RGB uint8 array.
    """
    scene = np.asarray(scene)
    if scene.ndim == 2:
        rgb = np.stack([scene] * 3, axis=-1)
    elif scene.ndim == 3 and scene.shape[2] >= 3:
        rgb = scene[:, :, :3]
    else:
        raise ValueError(f"Unsupported scene shape {scene.shape}")
    rgb = np.ascontiguousarray(rgb, dtype=np.uint8)

    filled = rasterize(cells, grid_width, grid_height)[:, :, 1]
    h, w = rgb.shape[:2]
    if filled.shape != (h, w):
        filled = cv2.resize(filled, (w, h), interpolation=cv2.INTER_NEAREST)

    overlay = rgb.copy()
    overlay[filled > 0] = color if color is not None else (0, 0, 0)
    return cv2.addWeighted(rgb, 1 - alpha, overlay, alpha, 0)
