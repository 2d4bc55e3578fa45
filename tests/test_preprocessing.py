"""
Tests for the preprocessing transforms and pipeline.
"""

import numpy as np
import pytest
from PIL import Image

from ocr_records.config import PreprocessingSettings
from ocr_records.errors import PreprocessingError
from ocr_records.preprocessing import (
    PreprocessingPipeline,
    grayscale,
    normalize_contrast,
    threshold,
)


def gradient(low: int, high: int) -> Image.Image:
    row = np.arange(low, high + 1, dtype=np.uint8).reshape(1, -1)
    return Image.fromarray(row)


class TestGrayscale:
    def test_rgb_becomes_single_channel(self):
        result = grayscale(Image.new("RGB", (4, 4), (255, 0, 0)))
        assert result.mode == "L"
        assert result.size == (4, 4)

    def test_rgba_and_palette_inputs(self):
        assert grayscale(Image.new("RGBA", (3, 3), (0, 0, 255, 128))).mode == "L"
        assert grayscale(Image.new("P", (3, 3))).mode == "L"

    def test_gray_input_is_unchanged(self):
        image = gradient(0, 9)
        assert list(grayscale(image).getdata()) == list(image.getdata())


class TestThreshold:
    def test_boundary_at_threshold(self):
        image = Image.new("L", (2, 1))
        image.putpixel((0, 0), 149)
        image.putpixel((1, 0), 150)

        result = threshold(image, 150)

        assert result.getpixel((0, 0)) == 0
        assert result.getpixel((1, 0)) == 255

    def test_output_is_binary(self):
        result = threshold(gradient(0, 255))
        assert set(result.getdata()) == {0, 255}

    def test_color_input(self):
        result = threshold(Image.new("RGB", (2, 2), (250, 250, 250)))
        assert result.mode == "L"
        assert set(result.getdata()) == {255}

    def test_out_of_range_threshold(self):
        with pytest.raises(PreprocessingError):
            threshold(gradient(0, 10), 300)


class TestNormalizeContrast:
    def test_stretches_to_full_range(self):
        result = normalize_contrast(gradient(100, 150))
        assert result.getextrema() == (0, 255)

    def test_flat_image_is_left_alone(self):
        result = normalize_contrast(Image.new("L", (5, 5), 128))
        assert result.getextrema() == (128, 128)


class TestPreprocessingPipeline:
    def test_default_steps(self):
        pipeline = PreprocessingPipeline(PreprocessingSettings())
        assert pipeline.step_names == ["grayscale", "threshold", "normalize_contrast"]

    def test_optional_steps_can_be_disabled(self):
        pipeline = PreprocessingPipeline(PreprocessingSettings(grayscale=False, normalize=False))
        assert pipeline.step_names == ["threshold"]

    def test_process_produces_binary_image(self):
        image = Image.new("RGB", (20, 10), "white")
        image.paste((0, 0, 0), (5, 2, 15, 8))

        result = PreprocessingPipeline(PreprocessingSettings()).process(image)

        assert result.mode == "L"
        assert set(result.getdata()) <= {0, 255}

    def test_process_file_writes_png(self, tmp_path, png_bytes):
        source = tmp_path / "input.jpg"
        source.write_bytes(png_bytes)
        destination = tmp_path / "out.png"

        PreprocessingPipeline(PreprocessingSettings()).process_file(source, destination)

        with Image.open(destination) as result:
            assert result.format == "PNG"
            assert result.mode == "L"

    def test_disabled_pipeline_copies_file(self, tmp_path, png_bytes):
        source = tmp_path / "input.png"
        source.write_bytes(png_bytes)
        destination = tmp_path / "out.png"

        PreprocessingPipeline(PreprocessingSettings(enabled=False)).process_file(source, destination)

        assert destination.read_bytes() == png_bytes

    def test_undecodable_file_raises(self, tmp_path):
        source = tmp_path / "broken.png"
        source.write_bytes(b"definitely not an image")

        with pytest.raises(PreprocessingError, match="Failed to load image"):
            PreprocessingPipeline(PreprocessingSettings()).process_file(source, tmp_path / "out.png")

    def test_failing_custom_step_aborts(self):
        def explode(image):
            raise ValueError("boom")

        pipeline = PreprocessingPipeline(PreprocessingSettings())
        pipeline.add_step("explode", explode)

        with pytest.raises(PreprocessingError) as exc_info:
            pipeline.process(Image.new("RGB", (4, 4)))
        assert exc_info.value.details == {"step": "explode"}

    def test_remove_step(self):
        pipeline = PreprocessingPipeline(PreprocessingSettings())
        pipeline.remove_step("normalize_contrast")
        assert "normalize_contrast" not in pipeline.step_names
