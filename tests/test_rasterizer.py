"""
Tests for mask rasterization and the PNG/data URL codec.
"""

import base64
import io

import numpy as np
import pytest
from PIL import Image

from backend.errors import MaskPayloadError
from backend.rasterizer import (
    DATA_URL_PREFIX, decode_data_url, encode_png, mask_png, overlay_on_scene,
    rasterize, read_mask, to_data_url,
)


class TestRasterize:

    def test_empty_cells_give_blank_mask(self):
        mask = rasterize(frozenset())
        assert mask.shape == (256, 256, 2)
        assert not mask.any()

    def test_single_cell_is_single_black_pixel(self):
        img = Image.open(io.BytesIO(mask_png({(0, 0)})))
        assert img.size == (256, 256)
        assert img.mode == "LA"
        arr = np.array(img)
        assert tuple(arr[0, 0]) == (0, 255)
        assert arr[:, :, 1].sum() == 255

    def test_cells_map_to_x_y_pixels(self):
        mask = rasterize({(10, 3)})
        assert mask[3, 10, 1] == 255
        assert mask[10, 3, 1] == 0

    def test_out_of_grid_cells_ignored(self):
        mask = rasterize({(300, 1), (-1, 0), (1, 1)})
        assert mask[:, :, 1].sum() == 255

    def test_custom_grid_size(self):
        assert rasterize({(0, 0)}, grid_width=8, grid_height=4).shape == (4, 8, 2)


class TestCodec:

    def test_data_url_round_trip(self):
        png = encode_png(rasterize({(5, 6)}))
        url = to_data_url(png)
        assert url.startswith(DATA_URL_PREFIX)
        assert decode_data_url(url) == png

    def test_bare_base64_accepted(self):
        assert decode_data_url(base64.b64encode(b"abc").decode()) == b"abc"

    @pytest.mark.parametrize("payload", ["", None, "data:image/jpeg;base64,AAAA", "not base64!"])
    def test_bad_payloads(self, payload):
        with pytest.raises(MaskPayloadError):
            decode_data_url(payload)

    def test_read_mask(self):
        arr = read_mask(mask_png({(1, 2)}))
        assert arr.shape == (256, 256, 2)
        assert arr[2, 1, 1] == 255

    def test_read_mask_rejects_garbage(self):
        with pytest.raises(MaskPayloadError):
            read_mask(b"not a png")


class TestOverlay:

    def test_overlay_scales_cells_to_scene(self):
        scene = np.full((512, 512, 3), 200, dtype=np.uint8)
        out = overlay_on_scene(scene, {(0, 0)}, alpha=1.0)
        assert out.shape == (512, 512, 3)
        # cell (0, 0) covers a 2x2 pixel block
        assert (out[:2, :2] == 0).all()
        assert (out[2:, 2:] == 200).all()

    def test_overlay_accepts_grayscale_and_rgba(self):
        assert overlay_on_scene(np.zeros((256, 256), np.uint8), set()).shape == (256, 256, 3)
        assert overlay_on_scene(np.zeros((256, 256, 4), np.uint8), set()).shape == (256, 256, 3)
