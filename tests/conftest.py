from pathlib import Path

import cv2
import numpy as np
import pytest


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def rgb_image(rng):
    """Случайное RGB изображение 24x17 (нечетная ширина)"""
    return rng.integers(0, 256, size=(24, 17, 3), dtype=np.uint8)


def _write_bmp(path: Path, rgb: np.ndarray):
    path.parent.mkdir(parents=True, exist_ok=True)
    assert cv2.imwrite(str(path), cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR))


@pytest.fixture
def mdid_dir(tmp_path, rng):
    """
    Мини-датасет в структуре MDID: 2 эталона по 3 искажения.

    MOS убывает с силой шума, PSNR.txt содержит одно нечисловое значение.
    """
    root = tmp_path / "MDID"
    mos, psnr = [], []

    for ref_idx in (1, 2):
        reference = rng.integers(40, 216, size=(16, 16, 3), dtype=np.uint8)
        _write_bmp(root / "reference_images" / f"img{ref_idx:02d}.bmp", reference)

        for level in (1, 2, 3):
            noise = rng.normal(0, 6 * level, size=reference.shape)
            distorted = np.clip(reference + noise, 0, 255).astype(np.uint8)
            _write_bmp(root / "distortion_images" / f"img{ref_idx:02d}_1_{level}.bmp", distorted)
            mos.append(8.0 - level + 0.1 * ref_idx)
            psnr.append(40.0 - 5 * level)

    # мусор, который загрузчик должен пропустить
    (root / "reference_images" / "notes.txt").write_text("skip me")
    (root / "distortion_images" / "readme.md").write_text("skip me")
    (root / "distortion_images" / "subdir").mkdir()

    metrics_dir = root / "metrics_results"
    metrics_dir.mkdir()
    psnr_lines = [f"{v}" for v in psnr]
    psnr_lines[4] = "n/a"
    (metrics_dir / "PSNR.txt").write_text("\r\n".join(psnr_lines) + "\r\n")
    (metrics_dir / "SSIM.txt").write_text("\n".join(str(1.0 - 0.1 * (i % 3)) for i in range(6)) + "\n\n9.99\n")

    (root / "mos.txt").write_text("\r\n".join(str(v) for v in mos) + "\r\n")
    (root / "mos_std.txt").write_text("\r\n".join("0.5" for _ in mos) + "\r\n")
    return root
