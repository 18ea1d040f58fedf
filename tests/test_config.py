"""Tests for resolving engine settings from a key/value mapping."""

import logging

import pytest
from pydantic import ValidationError

from tincture_colors import Color
from tincture_config import SETTINGS_KEYS, EngineSettings
from tincture_errors import SettingsError, TinctureError
from tincture_format import parse_template
from tincture_reference import ChromaticAdaptationMethod, Illuminant, RgbWorkingSpace
from tincture_render import ColorDisplayFormat


class TestFromMapping:
    """Tests for parsing a loaded settings mapping."""

    def test_defaults(self):
        settings = EngineSettings.from_mapping({})
        assert settings == EngineSettings()
        assert settings.working_space is RgbWorkingSpace.SRGB
        assert settings.illuminant is Illuminant.D65
        assert settings.adaptation_method is ChromaticAdaptationMethod.BRADFORD
        assert settings.display_format is ColorDisplayFormat.HEX

    @pytest.mark.parametrize("raw, expected", [
        ("sRGB", RgbWorkingSpace.SRGB),
        ("Adobe", RgbWorkingSpace.ADOBE),
        ("adobe rgb", RgbWorkingSpace.ADOBE),
        ("WideGamut", RgbWorkingSpace.WIDE_GAMUT),
        ("wide_gamut", RgbWorkingSpace.WIDE_GAMUT),
        ("ProPhoto RGB", RgbWorkingSpace.PROPHOTO),
        ("PAL/SECAM RGB", RgbWorkingSpace.PAL),
        (RgbWorkingSpace.ECI, RgbWorkingSpace.ECI),
    ])
    def test_working_space_aliases(self, raw, expected):
        settings = EngineSettings.from_mapping({"rgb_working_space": raw})
        assert settings.working_space is expected

    @pytest.mark.parametrize("raw, expected", [
        ("Bradford", ChromaticAdaptationMethod.BRADFORD),
        ("VonKries", ChromaticAdaptationMethod.VON_KRIES),
        ("von kries", ChromaticAdaptationMethod.VON_KRIES),
        ("XYZScaling", ChromaticAdaptationMethod.XYZ_SCALING),
    ])
    def test_adaptation_method_aliases(self, raw, expected):
        settings = EngineSettings.from_mapping({"chromatic_adaptation_method": raw})
        assert settings.adaptation_method is expected

    @pytest.mark.parametrize("raw, expected", [
        ("hex", ColorDisplayFormat.HEX),
        ("hex-uppercase", ColorDisplayFormat.HEX_UPPERCASE),
        ("HexUppercase", ColorDisplayFormat.HEX_UPPERCASE),
        ("css-rgb", ColorDisplayFormat.CSS_RGB),
        ("css_hsl", ColorDisplayFormat.CSS_HSL),
        ("custom", ColorDisplayFormat.CUSTOM),
    ])
    def test_display_format_aliases(self, raw, expected):
        settings = EngineSettings.from_mapping({"color_display_format": raw})
        assert settings.display_format is expected

    def test_illuminant_follows_working_space(self, caplog):
        """Without an explicit illuminant the working space's white is used."""
        with caplog.at_level(logging.DEBUG, logger="tincture_config"):
            settings = EngineSettings.from_mapping({"rgb_working_space": "ProPhoto"})
        assert settings.illuminant is Illuminant.D50
        assert "no illuminant set" in caplog.text

    def test_explicit_illuminant(self):
        settings = EngineSettings.from_mapping({"rgb_working_space": "ProPhoto", "illuminant": "d65"})
        assert settings.illuminant is Illuminant.D65

    def test_unknown_value_raises(self):
        with pytest.raises(SettingsError) as info:
            EngineSettings.from_mapping({"illuminant": "D93"})
        assert info.value.key == "illuminant"
        assert info.value.value == "D93"
        assert "D65" in str(info.value)

    def test_non_string_value_raises(self):
        with pytest.raises(TinctureError):
            EngineSettings.from_mapping({"rgb_working_space": 3})

    def test_unknown_keys_warn(self):
        with pytest.warns(UserWarning, match="window_width"):
            settings = EngineSettings.from_mapping({"window_width": 800})
        assert settings == EngineSettings()

    def test_saved_formats(self):
        settings = EngineSettings.from_mapping({"saved_color_formats": ["{r}", "{hsl_h360:d}"]})
        assert settings.saved_formats == ("{r}", "{hsl_h360:d}")

    @pytest.mark.parametrize("raw", ["{r}", ["{r}", 5]])
    def test_malformed_saved_formats_raise(self, raw):
        with pytest.raises(SettingsError):
            EngineSettings.from_mapping({"saved_color_formats": raw})

    def test_non_string_custom_format_raises(self):
        with pytest.raises(SettingsError):
            EngineSettings.from_mapping({"custom_display_fmt_str": ["{r}"]})

    def test_error_chains_validation_error(self):
        with pytest.raises(SettingsError) as info:
            EngineSettings.from_mapping({"chromatic_adaptation_method": "CAT02"})
        assert isinstance(info.value.__cause__, ValidationError)
        assert info.value.key == "chromatic_adaptation_method"
        assert "BRADFORD" in info.value.choices

    def test_nested_saved_format_error_reports_whole_value(self):
        with pytest.raises(SettingsError) as info:
            EngineSettings.from_mapping({"saved_color_formats": ["{r}", 5]})
        assert info.value.key == "saved_color_formats"
        assert info.value.value == ["{r}", 5]
        assert info.value.choices is None

    def test_frozen(self):
        settings = EngineSettings()
        with pytest.raises(ValidationError):
            settings.illuminant = Illuminant.D50
        assert hash(settings) == hash(EngineSettings())


class TestToMapping:
    """Tests for serialising settings back to a mapping."""

    def test_keys_are_known(self):
        assert set(EngineSettings().to_mapping()) <= set(SETTINGS_KEYS)

    def test_empty_optionals_omitted(self):
        out = EngineSettings().to_mapping()
        assert "custom_display_fmt_str" not in out
        assert "saved_color_formats" not in out

    def test_round_trip(self):
        settings = EngineSettings(
            working_space=RgbWorkingSpace.WIDE_GAMUT,
            illuminant=Illuminant.F7,
            adaptation_method=ChromaticAdaptationMethod.VON_KRIES,
            display_format=ColorDisplayFormat.CUSTOM,
            custom_display_template="{r255}",
            saved_formats=("{lab_l:.2}",),
        )
        assert EngineSettings.from_mapping(settings.to_mapping()) == settings


class TestRendering:
    """Tests for rendering through a settings context."""

    def test_render_text_and_compiled(self, gray):
        settings = EngineSettings()
        assert settings.render(gray, "{r255}") == "127"
        assert settings.render(gray, parse_template("{g255:x}")) == "7f"

    def test_render_saved_format_by_index(self, gray):
        settings = EngineSettings(saved_formats=("{r}", "{b255:o}"))
        assert settings.render(gray, 1) == "177"

    def test_render_missing_saved_format(self, gray):
        with pytest.raises(SettingsError):
            EngineSettings().render(gray, 0)

    def test_context_reaches_renderer(self, teal):
        srgb = EngineSettings().render(teal, "{lab_l:.4}")
        d50 = EngineSettings(illuminant=Illuminant.D50).render(teal, "{lab_l:.4}")
        assert srgb == "55.6818"
        assert d50 != srgb

    def test_display(self, teal):
        assert EngineSettings().display(teal) == "#2390b4"
        custom = EngineSettings(display_format=ColorDisplayFormat.CUSTOM,
                                custom_display_template="{r255},{g255},{b255}")
        assert custom.display(teal) == "35,144,180"

    def test_replace(self):
        settings = EngineSettings().replace(working_space=RgbWorkingSpace.APPLE)
        assert settings.working_space is RgbWorkingSpace.APPLE
        assert settings.illuminant is Illuminant.D65

    def test_replace_validates_changes(self):
        assert EngineSettings().replace(working_space="adobe rgb").working_space is RgbWorkingSpace.ADOBE
        with pytest.raises(SettingsError):
            EngineSettings().replace(display_format="sepia")
        with pytest.raises(TypeError):
            EngineSettings().replace(gamma=2.2)

    def test_display_colors_from_hex(self):
        settings = EngineSettings(display_format=ColorDisplayFormat.CSS_RGB)
        assert settings.display(Color.from_hex("#ff8000")) == "rgb(255,128,0)"
