import pytest

from geocircle.options import CircleOptions, normalize_keys


class TestCircleOptions:

    def test_defaults(self):
        options = CircleOptions()
        assert options.editable is False
        assert options.min_radius == 10
        assert options.max_radius == 1.1e6
        assert options.fill_color == '#FB6A4A'
        assert options.refine_stroke is False
        assert options.properties == {}
        assert options.debug_el is None

    def test_camel_case_aliases(self):
        options = CircleOptions.from_mapping({'minRadius': 1500, 'fillColor': '#29AB87'}, editable=True)
        assert options.min_radius == 1500
        assert options.fill_color == '#29AB87'
        assert options.editable is True

    def test_unknown_option(self):
        with pytest.raises(TypeError):
            normalize_keys({'radius': 5})

    def test_min_above_max(self):
        with pytest.raises(ValueError):
            CircleOptions(min_radius=100, max_radius=50)

    def test_merged_returns_copy(self):
        options = CircleOptions()
        changed = options.merged({'strokeWeight': 2})
        assert changed.stroke_weight == 2
        assert options.stroke_weight == 0.5
