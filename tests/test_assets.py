"""
Tests for assets module.

Run with: pytest tests/test_assets.py -v
"""

import pytest

from assets import (
    ASSET_LIBRARY,
    CATEGORIES,
    AssetDefinition,
    assets_by_category,
    get_definition,
    icon_pixels,
    icon_svg,
    render_icon,
)


class TestLibrary:
    """Tests for the built-in asset catalog."""

    def test_size_and_categories(self):
        assert len(ASSET_LIBRARY) == 28
        for definition in ASSET_LIBRARY.values():
            assert definition.category in CATEGORIES

    def test_every_category_populated(self):
        total = 0
        for category in CATEGORIES:
            items = assets_by_category(category)
            assert items
            total += len(items)
        assert total == len(ASSET_LIBRARY)

    def test_lookup(self):
        assert get_definition("chest").label == "Chest"
        assert get_definition("nope") is None

    @pytest.mark.parametrize("asset_id", sorted(ASSET_LIBRARY))
    def test_every_icon_renders(self, asset_id):
        icon = render_icon(ASSET_LIBRARY[asset_id], 48)
        assert icon.size == (48, 48)
        assert icon.mode == "RGBA"
        assert icon.getchannel("A").getbbox() is not None


class TestIconSvg:
    """Tests for the SVG wrapped around each path."""

    def test_strokes_in_definition_color(self):
        svg = icon_svg(get_definition("chest"))
        assert 'viewBox="0 0 24 24"' in svg
        assert 'stroke="#06b6d4" stroke-width="2"' in svg
        assert 'stroke="#ffffff" stroke-width="1" stroke-opacity="0.8"' in svg

    def test_glow_variant_is_single_wide_stroke(self):
        svg = icon_svg(get_definition("chest"), glow=True)
        assert svg.count("<path") == 1
        assert 'stroke-width="4"' in svg

    def test_path_data_is_escaped(self):
        definition = AssetDefinition("odd", 'M0 0L1 1"/><x', "Odd", "#fff", "loot")
        assert '"/><x' not in icon_svg(definition)


class TestRendering:
    """Tests for rasterised icons."""

    def test_square_icon_strokes_its_outline(self):
        # Outer square runs 4..20 on the 24 box, 8..40 at 48px
        icon = render_icon(get_definition("enemy_melee"), 48)
        assert icon.getpixel((8, 24))[3] > 0
        assert icon.getpixel((2, 24))[3] == 0
        # Inner square 9..15 leaves the middle open
        assert icon.getpixel((24, 24))[3] == 0

    def test_stroke_color(self):
        icon = render_icon(AssetDefinition("bar", "M2 12H22", "Bar", "#ff0000", "loot"), 48)
        # Outer edge of the 4px colour stroke, clear of the white core
        r, g, b, a = icon.getpixel((12, 22))
        assert a == 255
        assert r > 200 and g < 60 and b < 60

    def test_rendered_icons_are_cached(self):
        definition = get_definition("tree")
        assert render_icon(definition, 30) is render_icon(definition, 30)
        assert render_icon(definition, 30) is not render_icon(definition, 31)

    def test_definition_scale_shrinks_icon(self):
        assert icon_pixels(get_definition("chest"), 60) == 60
        assert icon_pixels(get_definition("torch"), 60) == 48
        assert icon_pixels(get_definition("chest"), 0.2) == 1
