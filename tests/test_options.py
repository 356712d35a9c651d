"""Tests for domain/options.py"""

from pathlib import Path

import pytest

from downsize.domain.exceptions import InvalidOptionsException
from downsize.domain.options import ConversionOptions, WatermarkOptions, coerce_options


class TestConversionOptions:
    def test_defaults(self):
        options = ConversionOptions()
        assert options.width is None
        assert options.height is None
        assert options.animated is False
        assert options.watermark is None
        assert options.quality is None
        assert options.format is None
        assert options.bitrate is None
        assert options.args == []
        assert options.crops is False

    def test_crops_requires_both_dimensions(self):
        assert ConversionOptions(width=10, height=20).crops is True
        assert ConversionOptions(width=10).crops is False
        assert ConversionOptions(height=10).crops is False

    @pytest.mark.parametrize("quality", [-1, 101, 50.5, True])
    def test_rejects_invalid_quality(self, quality):
        with pytest.raises(InvalidOptionsException):
            ConversionOptions(quality=quality)

    @pytest.mark.parametrize("quality", [0, 50, 100, None])
    def test_accepts_valid_quality(self, quality):
        assert ConversionOptions(quality=quality).quality == quality

    @pytest.mark.parametrize("field", ["width", "height"])
    @pytest.mark.parametrize("value", [0, -5, "100"])
    def test_rejects_invalid_dimensions(self, field, value):
        with pytest.raises(InvalidOptionsException):
            ConversionOptions(**{field: value})

    def test_single_arg_string_becomes_list(self):
        assert ConversionOptions(args="-sharpen 1").args == ["-sharpen 1"]

    def test_watermark_file_is_path(self):
        watermark = WatermarkOptions(file="logo.png", position="North")
        assert watermark.file == Path("logo.png")


class TestFromDict:
    def test_builds_watermark_from_mapping(self):
        options = ConversionOptions.from_dict(
            {"width": 300, "watermark": {"file": "logo.png", "position": "Repeat"}}
        )
        assert options.width == 300
        assert options.watermark == WatermarkOptions(file=Path("logo.png"), position="Repeat")

    def test_watermark_mapping_requires_file(self):
        with pytest.raises(InvalidOptionsException):
            ConversionOptions.from_dict({"watermark": {"position": "North"}})

    def test_unknown_keys_are_rejected(self):
        with pytest.raises(InvalidOptionsException, match="resolution"):
            ConversionOptions.from_dict({"resolution": "720p"})

    def test_empty_mapping_gives_defaults(self):
        assert ConversionOptions.from_dict({}) == ConversionOptions()
        assert ConversionOptions.from_dict(None) == ConversionOptions()


class TestCoerceOptions:
    def test_accepts_none_mapping_and_instance(self):
        options = ConversionOptions(width=5)
        assert coerce_options(None) == ConversionOptions()
        assert coerce_options({"height": 7}).height == 7
        assert coerce_options(options) is options

    def test_rejects_other_types(self):
        with pytest.raises(InvalidOptionsException):
            coerce_options(["width", 100])
