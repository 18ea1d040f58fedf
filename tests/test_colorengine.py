"""Tests for the JIT conversion engine."""

import numpy as np
import pytest

from tincture_colorengine import ColorSpaceEngine as E
from tincture_colorengine import flush_invalid, handle_shapes
from tincture_reference import ChromaticAdaptationMethod, Illuminant, RgbWorkingSpace


TEAL = np.array([35.0, 144.0, 180.0]) / 255.0


class TestShapeHandling:
    """Tests for the (C,) / (N, C) contract."""

    def test_single_sample_keeps_rank(self):
        assert E.rgb_to_hsv(np.array([0.2, 0.4, 0.6])).shape == (3,)

    def test_batch_keeps_rank(self, rgb_batch):
        assert E.rgb_to_xyz(rgb_batch, RgbWorkingSpace.SRGB).shape == (32, 3)

    def test_cmyk_channel_counts(self, rgb_batch):
        cmyk = E.rgb_to_cmyk(rgb_batch)
        assert cmyk.shape == (32, 4)
        assert E.cmyk_to_rgb(cmyk).shape == (32, 3)
        assert E.cmyk_to_rgb(np.zeros(4)).shape == (3,)

    def test_wrong_channel_count_raises(self):
        with pytest.raises(ValueError, match="Expected shape"):
            E.rgb_to_hsv(np.zeros(4))
        with pytest.raises(ValueError, match="Expected shape"):
            E.cmyk_to_rgb(np.zeros(3))

    def test_read_only_input(self):
        arr = np.array([0.1, 0.2, 0.3])
        arr.setflags(write=False)
        assert E.rgb_to_hsv(arr).shape == (3,)

    def test_decorator_without_arguments(self):
        @handle_shapes
        def double(arr):
            return arr * 2.0

        np.testing.assert_array_equal(double(np.ones(3)), np.full(3, 2.0))


class TestFlushInvalid:
    """Tests for the NaN / infinity / subnormal policy."""

    def test_flushes_non_finite_and_subnormal(self):
        out = flush_invalid(np.array([np.nan, np.inf, -np.inf, 5e-324, -1e-310, 1.0, -2.5]))
        np.testing.assert_array_equal(out, [0.0, 0.0, 0.0, 0.0, 0.0, 1.0, -2.5])

    def test_keeps_smallest_normal(self):
        tiny = np.finfo(np.float64).tiny
        assert flush_invalid(np.array([tiny]))[0] == tiny


class TestCompanding:
    """Tests for the per-working-space transfer functions."""

    def test_srgb_expand_known_value(self):
        linear = E.inverse_compand(np.array([0.5, 0.5, 0.5]), RgbWorkingSpace.SRGB)
        assert linear[0] == pytest.approx(((0.5 + 0.055) / 1.055) ** 2.4)

    def test_srgb_linear_segment(self):
        linear = E.inverse_compand(np.array([0.01, 0.02, 0.04]), RgbWorkingSpace.SRGB)
        np.testing.assert_allclose(linear, np.array([0.01, 0.02, 0.04]) / 12.92)

    def test_gamma_is_sign_preserving(self):
        out = E.compand(np.array([-0.25, 0.0, 0.25]), RgbWorkingSpace.ADOBE)
        assert out[0] == pytest.approx(-(0.25 ** (1.0 / 2.2)))
        assert out[1] == 0.0
        assert out[2] == pytest.approx(0.25 ** (1.0 / 2.2))

    def test_lstar_segments(self):
        out = E.compand(np.array([0.001, 0.5, 1.0]), RgbWorkingSpace.ECI)
        assert out[0] == pytest.approx(0.001 * (24389.0 / 27.0) / 100.0)
        assert out[1] == pytest.approx(1.16 * 0.5 ** (1.0 / 3.0) - 0.16)
        assert out[2] == pytest.approx(1.0)

    @pytest.mark.parametrize("space", list(RgbWorkingSpace))
    def test_round_trip(self, space, rgb_batch):
        linear = E.inverse_compand(rgb_batch, space)
        np.testing.assert_allclose(E.compand(linear, space), rgb_batch, rtol=1e-9, atol=1e-12)


class TestRgbXyz:
    """Tests for RGB <-> XYZ through the working-space matrices."""

    @pytest.mark.parametrize("space", list(RgbWorkingSpace))
    def test_white_is_reference_white(self, space):
        xyz = E.rgb_to_xyz(np.ones(3), space)
        np.testing.assert_allclose(xyz, space.reference_illuminant.value, atol=1e-9)

    def test_black_is_zero(self):
        np.testing.assert_array_equal(E.rgb_to_xyz(np.zeros(3), RgbWorkingSpace.SRGB), np.zeros(3))

    @pytest.mark.parametrize("space", list(RgbWorkingSpace))
    def test_round_trip(self, space, rgb_batch):
        """XYZ(RGB(XYZ(c))) reproduces XYZ(c) for every working space."""
        xyz = E.rgb_to_xyz(rgb_batch, space)
        back = E.rgb_to_xyz(E.xyz_to_rgb(xyz, space), space)
        np.testing.assert_allclose(back, xyz, rtol=1e-3)

    def test_clip_clamps_linear_rgb(self):
        rgb = E.xyz_to_rgb(np.array([2.0, 2.0, 2.0]), RgbWorkingSpace.SRGB, clip=True)
        assert np.all(rgb <= 1.0)


class TestLabLuv:
    """Tests for the CIE perceptual spaces."""

    def test_reference_white_lab(self):
        lab = E.xyz_to_lab(np.array(Illuminant.D50.value), Illuminant.D50)
        np.testing.assert_allclose(lab, [100.0, 0.0, 0.0], atol=1e-9)

    def test_black_lab(self):
        np.testing.assert_allclose(E.xyz_to_lab(np.zeros(3)), np.zeros(3), atol=1e-12)

    def test_teal_lab(self):
        lab = E.rgb_to_lab(TEAL, RgbWorkingSpace.SRGB, Illuminant.D65)
        np.testing.assert_allclose(lab, [55.6818, -17.1274, -27.2707], atol=1e-3)

    def test_lab_round_trip(self, rgb_batch):
        xyz = E.rgb_to_xyz(rgb_batch, RgbWorkingSpace.SRGB)
        back = E.lab_to_xyz(E.xyz_to_lab(xyz))
        np.testing.assert_allclose(back, xyz, rtol=1e-9)

    def test_lab_round_trip_through_lch(self, rgb_batch):
        """Lab(LchAB(c)) reproduces Lab(c)."""
        lab = E.rgb_to_lab(rgb_batch, RgbWorkingSpace.SRGB, Illuminant.D65)
        back = E.lch_ab_to_lab(E.lab_to_lch_ab(lab))
        np.testing.assert_allclose(back, lab, rtol=1e-3, atol=1e-9)

    def test_reference_white_luv(self):
        luv = E.xyz_to_luv(np.array(Illuminant.D65.value), Illuminant.D65)
        np.testing.assert_allclose(luv, [100.0, 0.0, 0.0], atol=1e-9)

    def test_black_luv(self):
        np.testing.assert_array_equal(E.xyz_to_luv(np.zeros(3)), np.zeros(3))
        np.testing.assert_array_equal(E.luv_to_xyz(np.zeros(3)), np.zeros(3))

    @pytest.mark.parametrize("illuminant", [Illuminant.D65, Illuminant.D50, Illuminant.A])
    def test_luv_round_trip(self, illuminant, rgb_batch):
        xyz = E.rgb_to_xyz(rgb_batch, RgbWorkingSpace.SRGB)
        back = E.luv_to_xyz(E.xyz_to_luv(xyz, illuminant), illuminant)
        np.testing.assert_allclose(back, xyz, rtol=1e-9)

    def test_adapted_lab_round_trip(self, rgb_batch):
        args = (RgbWorkingSpace.SRGB, Illuminant.D50, ChromaticAdaptationMethod.BRADFORD)
        back = E.lab_to_rgb(E.rgb_to_lab(rgb_batch, *args), *args)
        np.testing.assert_allclose(back, rgb_batch, rtol=1e-6)

    def test_adapted_luv_round_trip(self, rgb_batch):
        args = (RgbWorkingSpace.ADOBE, Illuminant.A, ChromaticAdaptationMethod.VON_KRIES)
        back = E.luv_to_rgb(E.rgb_to_luv(rgb_batch, *args), *args)
        np.testing.assert_allclose(back, rgb_batch, rtol=1e-6)


class TestPolar:
    """Tests for the Cartesian <-> LCh transform."""

    def test_hue_is_normalised(self):
        lch = E.lab_to_lch_ab(np.array([50.0, 0.0, -10.0]))
        np.testing.assert_allclose(lch, [50.0, 10.0, 270.0])

    def test_positive_axis(self):
        lch = E.luv_to_lch_uv(np.array([20.0, 3.0, 4.0]))
        assert lch[1] == pytest.approx(5.0)
        assert lch[2] == pytest.approx(np.degrees(np.arctan2(4.0, 3.0)))

    @pytest.mark.parametrize("to_lch", [E.lab_to_lch_ab, E.luv_to_lch_uv])
    def test_tiny_negative_hue_wraps_to_zero(self, to_lch):
        """A hue a hair below zero stays inside [0, 360)."""
        lch = to_lch(np.array([50.0, 1.0, -1e-16]))
        assert 0.0 <= lch[2] < 360.0
        assert lch[2] == 0.0
        np.testing.assert_allclose(lch[:2], [50.0, 1.0])

    def test_inverse(self):
        luv = E.lch_uv_to_luv(np.array([50.0, 10.0, 90.0]))
        np.testing.assert_allclose(luv, [50.0, 0.0, 10.0], atol=1e-12)


class TestXyY:
    """Tests for chromaticity coordinates."""

    def test_white_chromaticity(self):
        xyY = E.xyz_to_xyY(np.array(Illuminant.E.value))
        np.testing.assert_allclose(xyY, [1.0 / 3.0, 1.0 / 3.0, 1.0])

    def test_black_is_zero(self):
        np.testing.assert_array_equal(E.xyz_to_xyY(np.zeros(3)), np.zeros(3))

    def test_zero_y_gives_zero_xyz(self):
        np.testing.assert_array_equal(E.xyY_to_xyz(np.array([0.3, 0.0, 0.5])), np.zeros(3))

    def test_round_trip(self, rgb_batch):
        xyz = E.rgb_to_xyz(rgb_batch, RgbWorkingSpace.SRGB)
        np.testing.assert_allclose(E.xyY_to_xyz(E.xyz_to_xyY(xyz)), xyz, rtol=1e-12)


class TestCmyk:
    """Tests for CMYK, including the black degeneracy."""

    def test_black(self):
        """Pure black is c = m = y = 0, k = 1, never NaN."""
        np.testing.assert_array_equal(E.rgb_to_cmyk(np.zeros(3)), [0.0, 0.0, 0.0, 1.0])

    def test_white(self):
        np.testing.assert_array_equal(E.rgb_to_cmyk(np.ones(3)), [0.0, 0.0, 0.0, 0.0])

    def test_red(self):
        np.testing.assert_allclose(E.rgb_to_cmyk(np.array([1.0, 0.0, 0.0])), [0.0, 1.0, 1.0, 0.0])

    def test_to_rgb(self):
        rgb = E.cmyk_to_rgb(np.array([0.08, 0.0, 0.06, 0.27]))
        np.testing.assert_allclose(rgb, [0.6716, 0.73, 0.6862])

    def test_round_trip(self, rgb_batch):
        back = E.cmyk_to_rgb(E.rgb_to_cmyk(rgb_batch))
        np.testing.assert_allclose(back, rgb_batch, rtol=1e-12)


class TestHsvHsl:
    """Tests for the hue-based device spaces."""

    def test_red_to_hsv(self):
        np.testing.assert_allclose(E.rgb_to_hsv(np.array([1.0, 0.0, 0.0])), [0.0, 1.0, 1.0])

    def test_gray_has_zero_hue_and_saturation(self):
        np.testing.assert_allclose(E.rgb_to_hsv(np.full(3, 0.5)), [0.0, 0.0, 0.5])

    def test_black_to_hsv(self):
        np.testing.assert_array_equal(E.rgb_to_hsv(np.zeros(3)), np.zeros(3))

    @pytest.mark.parametrize("hsv, rgb", [
        ((0.0, 1.0, 1.0), (1.0, 0.0, 0.0)),
        ((1.0 / 6.0, 1.0, 1.0), (1.0, 1.0, 0.0)),
        ((1.0 / 3.0, 1.0, 1.0), (0.0, 1.0, 0.0)),
        ((0.5, 1.0, 1.0), (0.0, 1.0, 1.0)),
        ((2.0 / 3.0, 1.0, 1.0), (0.0, 0.0, 1.0)),
        ((1.0, 1.0, 1.0), (1.0, 0.0, 0.0)),
        ((0.5, 0.0, 0.0), (0.0, 0.0, 0.0)),
    ])
    def test_hsv_to_rgb(self, hsv, rgb):
        np.testing.assert_allclose(E.hsv_to_rgb(np.array(hsv)), rgb, atol=1e-12)

    @pytest.mark.parametrize("hsv, hsl", [
        ((0.0, 0.0, 0.0), (0.0, 0.0, 0.0)),
        ((0.0, 0.5, 0.0), (0.0, 0.0, 0.0)),
        ((0.0, 0.0, 1.0), (0.0, 0.0, 1.0)),
        ((0.0, 0.5, 0.5), (0.0, 1.0 / 3.0, 0.375)),
        ((0.0, 1.0, 1.0), (0.0, 1.0, 0.5)),
        ((0.5, 0.5, 0.5), (0.5, 1.0 / 3.0, 0.375)),
        ((0.75, 0.75, 0.75), (0.75, 0.6, 0.46875)),
    ])
    def test_hsv_to_hsl(self, hsv, hsl):
        np.testing.assert_allclose(E.hsv_to_hsl(np.array(hsv)), hsl, atol=1e-12)

    def test_hsl_round_trip(self, rgb_batch):
        back = E.hsl_to_rgb(E.rgb_to_hsl(rgb_batch))
        np.testing.assert_allclose(back, rgb_batch, rtol=1e-9)

    def test_hsv_round_trip(self, rgb_batch):
        back = E.hsv_to_rgb(E.rgb_to_hsv(rgb_batch))
        np.testing.assert_allclose(back, rgb_batch, rtol=1e-9)

    def test_hue_in_unit_interval(self, rgb_batch):
        hue = E.rgb_to_hsv(rgb_batch)[:, 0]
        assert np.all((hue >= 0.0) & (hue < 1.0))


class TestAdaptation:
    """Tests for XYZ chromatic adaptation."""

    @pytest.mark.parametrize("method", list(ChromaticAdaptationMethod))
    def test_white_to_white(self, method):
        out = E.adapt(np.array(Illuminant.D65.value), method, Illuminant.D65, Illuminant.D50)
        np.testing.assert_allclose(out, Illuminant.D50.value, atol=1e-9)

    def test_round_trip(self, rgb_batch):
        xyz = E.rgb_to_xyz(rgb_batch, RgbWorkingSpace.SRGB)
        m = ChromaticAdaptationMethod.BRADFORD
        back = E.adapt(E.adapt(xyz, m, Illuminant.D65, Illuminant.D50), m, Illuminant.D50, Illuminant.D65)
        np.testing.assert_allclose(back, xyz, rtol=1e-9)
