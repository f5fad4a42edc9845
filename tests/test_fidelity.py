import math
from collections import deque

import numpy as np
import pytest

from iqa_agreement.fidelity import (
    ImageMetric,
    block_difference,
    block_difference_gray,
    block_difference_luma,
    compute_image_metric,
    compute_image_metrics,
    mse,
    mse_gray,
    mse_rgb,
    psnr,
    psnr_rgb,
    split_channels,
    ssim_global,
    ssim_windowed,
    to_gray,
)
from iqa_agreement.fidelity.metrics import SSIM_C1, SSIM_C2


def _brute_force_block_difference(a: np.ndarray, b: np.ndarray) -> float:
    """Обход в ширину по уникальным прямоугольникам с прямым вычислением средних"""
    height, width = a.shape
    diff = a.astype(float) - b.astype(float)
    seen = set()
    queue = deque([(0, 0, width, height)])
    total = 0.0
    while queue:
        rect = queue.popleft()
        if rect in seen:
            continue
        seen.add(rect)
        x0, y0, x1, y1 = rect
        w, h = x1 - x0, y1 - y0
        total += diff[y0:y1, x0:x1].mean() ** 2 * (w * h) / (width * height)
        if w == 1 and h == 1:
            continue
        hw, hh = (w + 1) // 2, (h + 1) // 2
        queue.extend([
            (x0, y0, x0 + hw, y0 + hh),
            (x1 - hw, y0, x1, y0 + hh),
            (x0, y1 - hh, x0 + hw, y1),
            (x1 - hw, y1 - hh, x1, y1),
        ])
    return total


class TestColor:

    def test_gray_luminance_weights(self):
        image = np.array([[[255, 0, 0], [0, 255, 0], [0, 0, 255], [255, 255, 255]]], dtype=np.uint8)
        np.testing.assert_array_equal(to_gray(image), [[76, 150, 29, 255]])

    def test_gray_passthrough(self):
        gray = np.arange(12, dtype=np.uint8).reshape(3, 4)
        np.testing.assert_array_equal(to_gray(gray), gray)

    def test_split_channels(self, rgb_image):
        r, g, b = split_channels(rgb_image)
        for plane, index in ((r, 0), (g, 1), (b, 2)):
            assert plane.shape == rgb_image.shape[:2]
            np.testing.assert_array_equal(plane, rgb_image[:, :, index])

    def test_split_gray_image(self):
        gray = np.full((2, 3), 7, dtype=np.uint8)
        for plane in split_channels(gray):
            np.testing.assert_array_equal(plane, gray)


class TestIdenticalImages:

    def test_mse_zero(self, rgb_image):
        assert mse(rgb_image, rgb_image) == 0.0
        assert mse_rgb(rgb_image, rgb_image) == 0.0

    def test_psnr_infinite(self, rgb_image):
        assert psnr(rgb_image, rgb_image) == math.inf
        assert psnr_rgb(rgb_image, rgb_image) == math.inf

    def test_ssim_one(self, rgb_image):
        assert ssim_global(rgb_image, rgb_image) == pytest.approx(1.0)
        assert ssim_windowed(rgb_image, rgb_image) == pytest.approx(1.0)

    def test_ssim_one_for_constant_image(self):
        image = np.full((5, 5, 3), 90, dtype=np.uint8)
        assert ssim_global(image, image) == pytest.approx(1.0)

    def test_block_difference_zero(self, rgb_image):
        assert block_difference(rgb_image, rgb_image) == 0.0
        assert block_difference_luma(rgb_image, rgb_image) == 0.0


class TestMSE:

    def test_uniform_offset(self, rng):
        a = rng.integers(40, 200, size=(9, 11, 3), dtype=np.uint8)
        b = a + np.uint8(10)
        assert mse(a, b) == pytest.approx(100.0)
        assert mse_rgb(a, b) == pytest.approx(100.0)
        assert mse_gray(to_gray(a), to_gray(b)) == pytest.approx(100.0)

    def test_psnr_value(self, rng):
        a = rng.integers(40, 200, size=(9, 11, 3), dtype=np.uint8)
        b = a + np.uint8(10)
        assert psnr(a, b) == pytest.approx(10 * math.log10(65025 / 100))

    def test_solid_color_channel_decomposition(self):
        a = np.full((4, 5, 3), (10, 20, 30), dtype=np.uint8)
        b = np.full((4, 5, 3), (13, 20, 30), dtype=np.uint8)
        assert mse_rgb(a, b) == pytest.approx(3.0)

        gray_a = np.full((4, 5), 50, dtype=np.uint8)
        gray_b = np.full((4, 5), 53, dtype=np.uint8)
        assert mse_gray(gray_a, gray_b) == pytest.approx(9.0)
        assert mse_rgb(gray_a, gray_b) == pytest.approx(9.0)

    def test_luma_and_rgb_differ(self):
        a = np.full((2, 2, 3), (100, 100, 100), dtype=np.uint8)
        b = np.full((2, 2, 3), (110, 90, 100), dtype=np.uint8)
        assert mse(a, b) == pytest.approx(9.0)
        assert mse_rgb(a, b) == pytest.approx(200.0 / 3.0)

    def test_zero_area_is_nan(self):
        empty = np.zeros((0, 5, 3), dtype=np.uint8)
        assert math.isnan(mse(empty, empty))
        assert math.isnan(psnr(empty, empty))


class TestSSIM:

    def test_global_formula(self, rng):
        a = rng.integers(0, 256, size=(12, 10), dtype=np.uint8)
        b = np.clip(a.astype(int) + rng.integers(-20, 21, size=a.shape), 0, 255).astype(np.uint8)

        fa, fb = a.astype(float).ravel(), b.astype(float).ravel()
        ma, mb = fa.mean(), fb.mean()
        va, vb = fa.var(ddof=1), fb.var(ddof=1)
        cov = np.cov(fa, fb, ddof=1)[0, 1]
        expected = ((2 * ma * mb + SSIM_C1) * (2 * cov + SSIM_C2)) / ((ma ** 2 + mb ** 2 + SSIM_C1) * (va + vb + SSIM_C2))

        assert ssim_global(a, b) == pytest.approx(expected)

    def test_global_drops_with_noise(self, rng):
        a = rng.integers(0, 256, size=(16, 16), dtype=np.uint8)
        light = np.clip(a.astype(int) + rng.integers(-5, 6, size=a.shape), 0, 255).astype(np.uint8)
        heavy = np.clip(a.astype(int) + rng.integers(-80, 81, size=a.shape), 0, 255).astype(np.uint8)
        assert ssim_global(a, heavy) < ssim_global(a, light) < 1.0

    def test_single_pixel_is_nan(self):
        pixel = np.array([[10]], dtype=np.uint8)
        assert math.isnan(ssim_global(pixel, pixel))

    def test_windowed_small_image_is_nan(self):
        image = np.zeros((5, 5), dtype=np.uint8)
        assert math.isnan(ssim_windowed(image, image))


class TestBlockDifference:

    def test_single_pixel(self):
        assert block_difference_gray(np.array([[5]], np.uint8), np.array([[2]], np.uint8)) == pytest.approx(9.0)

    def test_two_pixels_counted_once(self):
        a = np.array([[4, 0]], dtype=np.uint8)
        b = np.zeros_like(a)
        # корень: 2^2 * 1, пиксели: 16 * 1/2 и 0 (совпадающие квадранты не повторяются)
        assert block_difference_gray(a, b) == pytest.approx(12.0)

    def test_overlapping_quadrants_counted_once(self):
        a = np.array([[3, 0, 0]], dtype=np.uint8)
        b = np.zeros_like(a)
        # 1 + (1.5^2 * 2/3) + 0 + 9/3 + 0 + 0
        assert block_difference_gray(a, b) == pytest.approx(5.5)

    @pytest.mark.parametrize("shape", [(1, 1), (2, 1), (3, 5), (7, 4), (8, 8), (9, 13)])
    def test_matches_breadth_first_traversal(self, rng, shape):
        a = rng.integers(0, 256, size=shape, dtype=np.uint8)
        b = rng.integers(0, 256, size=shape, dtype=np.uint8)
        assert block_difference_gray(a, b) == pytest.approx(_brute_force_block_difference(a, b))

    def test_symmetric_in_arguments(self, rng):
        a = rng.integers(0, 256, size=(6, 9), dtype=np.uint8)
        b = rng.integers(0, 256, size=(6, 9), dtype=np.uint8)
        assert block_difference_gray(a, b) == pytest.approx(block_difference_gray(b, a))

    def test_repeated_calls_are_independent(self, rng):
        a = rng.integers(0, 256, size=(5, 7), dtype=np.uint8)
        b = rng.integers(0, 256, size=(5, 7), dtype=np.uint8)
        assert block_difference_gray(a, b) == block_difference_gray(a, b)

    def test_rgb_averages_channels(self, rgb_image, rng):
        other = rng.integers(0, 256, size=rgb_image.shape, dtype=np.uint8)
        per_channel = [
            block_difference_gray(ca, cb)
            for ca, cb in zip(split_channels(rgb_image), split_channels(other))
        ]
        assert block_difference(rgb_image, other) == pytest.approx(sum(per_channel) / 3)

    def test_luma_variant(self, rgb_image, rng):
        other = rng.integers(0, 256, size=rgb_image.shape, dtype=np.uint8)
        expected = block_difference_gray(to_gray(rgb_image), to_gray(other))
        assert block_difference_luma(rgb_image, other) == pytest.approx(expected)

    def test_requires_single_plane(self, rgb_image):
        with pytest.raises(ValueError):
            block_difference_gray(rgb_image, rgb_image)


class TestInputTypes:

    def test_float_image_rejected(self, rgb_image):
        scaled = rgb_image.astype(np.float64) / 255.0
        with pytest.raises(ValueError):
            mse(scaled, scaled)

    def test_out_of_range_integers_rejected(self):
        image = np.full((4, 4), 300, dtype=np.int32)
        with pytest.raises(ValueError):
            psnr(image, image)

    def test_wide_integer_dtype_accepted(self, rgb_image):
        wide = rgb_image.astype(np.int64)
        assert mse_rgb(wide, rgb_image) == 0.0


class TestBounds:

    @pytest.mark.parametrize("metric", list(ImageMetric))
    def test_dimension_mismatch(self, metric):
        a = np.zeros((8, 8, 3), dtype=np.uint8)
        b = np.zeros((8, 9, 3), dtype=np.uint8)
        with pytest.raises(ValueError):
            compute_image_metric(metric, a, b)


class TestDispatch:

    def test_all_metrics_by_default(self, rgb_image):
        values = compute_image_metrics(rgb_image, rgb_image)
        assert set(values) == {m.value for m in ImageMetric}
        assert values["PSNR"] == math.inf
        assert values["MSEg"] == 0.0

    def test_selected_metrics(self, rgb_image, rng):
        other = rng.integers(0, 256, size=rgb_image.shape, dtype=np.uint8)
        values = compute_image_metrics(rgb_image, other, ["PSNRg", ImageMetric.SSIM])
        assert list(values) == ["PSNRg", "SSIM"]
        assert values["PSNRg"] == pytest.approx(psnr(rgb_image, other))

    def test_unknown_metric(self, rgb_image):
        with pytest.raises(ValueError):
            compute_image_metrics(rgb_image, rgb_image, ["VIF"])
