"""Tests for illuminants, working spaces and chromatic adaptation."""

import numpy as np
import pytest

from tincture_matrix import Matrix3
from tincture_reference import (
    ChromaticAdaptationMethod,
    Companding,
    Illuminant,
    RgbWorkingSpace,
    adaptation_matrix,
)


# Lindbloom, "RGB/XYZ Matrices", sRGB / D65.
SRGB_TO_XYZ = np.array([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041],
])

# Lindbloom, "Chromatic Adaptation", Bradford D65 -> D50.
BRADFORD_D65_TO_D50 = np.array([
    [1.0478112, 0.0228866, -0.0501270],
    [0.0295424, 0.9904844, -0.0170491],
    [-0.0092345, 0.0150436, 0.7521316],
])


class TestIlluminant:
    """Tests for the standard illuminant table."""

    def test_members(self):
        assert [i.name for i in Illuminant] == [
            "A", "B", "C", "D50", "D55", "D65", "D75", "E", "F2", "F7", "F11",
        ]

    def test_unit_luminance(self):
        for illuminant in Illuminant:
            assert illuminant.xyz[1] == 1.0

    def test_d65_reference_chromaticity(self):
        assert Illuminant.D65.reference_u == pytest.approx(0.19784, abs=1e-5)
        assert Illuminant.D65.reference_v == pytest.approx(0.46834, abs=1e-5)

    def test_equal_energy_chromaticity(self):
        # X = Y = Z gives u' = 4/19, v' = 9/19.
        assert Illuminant.E.reference_u == pytest.approx(4.0 / 19.0)
        assert Illuminant.E.reference_v == pytest.approx(9.0 / 19.0)


class TestRgbWorkingSpace:
    """Tests for working-space matrix derivation."""

    def test_members(self):
        assert len(RgbWorkingSpace) == 9

    def test_srgb_matrix_matches_published(self):
        np.testing.assert_allclose(RgbWorkingSpace.SRGB.rgb_matrix.array, SRGB_TO_XYZ, atol=1e-6)

    @pytest.mark.parametrize("space", list(RgbWorkingSpace))
    def test_white_maps_to_reference_white(self, space):
        """RGB (1, 1, 1) must land exactly on the reference illuminant."""
        white = space.rgb_matrix.array @ np.ones(3)
        np.testing.assert_allclose(white, space.reference_illuminant.xyz.array, atol=1e-9)

    @pytest.mark.parametrize("space", list(RgbWorkingSpace))
    def test_inverse_matrix(self, space):
        product = space.inverse_rgb_matrix @ space.rgb_matrix
        assert product.isclose(Matrix3.identity(), atol=1e-9)

    def test_matrices_are_cached(self):
        assert RgbWorkingSpace.ADOBE.rgb_matrix is RgbWorkingSpace.ADOBE.rgb_matrix
        assert RgbWorkingSpace.ADOBE.inverse_rgb_matrix is RgbWorkingSpace.ADOBE.inverse_rgb_matrix

    def test_companding_assignment(self):
        assert RgbWorkingSpace.SRGB.companding is Companding.SRGB
        assert RgbWorkingSpace.ECI.companding is Companding.LSTAR
        assert RgbWorkingSpace.APPLE.companding is Companding.GAMMA
        assert RgbWorkingSpace.APPLE.gamma == 1.8

    def test_reference_illuminants(self):
        assert RgbWorkingSpace.PROPHOTO.reference_illuminant is Illuminant.D50
        assert RgbWorkingSpace.NTSC.reference_illuminant is Illuminant.C
        assert RgbWorkingSpace.CIE.reference_illuminant is Illuminant.E

    def test_primaries_xyY(self):
        assert RgbWorkingSpace.SRGB.primaries_xyY[0] == (0.64, 0.33, 1.0)


class TestChromaticAdaptation:
    """Tests for composite adaptation matrices."""

    def test_same_illuminant_is_identity(self):
        m = adaptation_matrix(ChromaticAdaptationMethod.BRADFORD, Illuminant.D65, Illuminant.D65)
        assert m == Matrix3.identity()

    def test_bradford_matches_published(self):
        m = adaptation_matrix(ChromaticAdaptationMethod.BRADFORD, Illuminant.D65, Illuminant.D50)
        np.testing.assert_allclose(m.array, BRADFORD_D65_TO_D50, atol=1e-6)

    def test_xyz_scaling_is_diagonal_ratio(self):
        m = adaptation_matrix(ChromaticAdaptationMethod.XYZ_SCALING, Illuminant.D65, Illuminant.D50)
        expected = Matrix3.diagonal(Illuminant.D50.xyz / Illuminant.D65.xyz)
        assert m.isclose(expected)

    @pytest.mark.parametrize("method", list(ChromaticAdaptationMethod))
    def test_maps_source_white_to_destination_white(self, method):
        m = adaptation_matrix(method, Illuminant.A, Illuminant.D65)
        assert (m @ Illuminant.A.xyz).isclose(Illuminant.D65.xyz)

    @pytest.mark.parametrize("method", list(ChromaticAdaptationMethod))
    def test_reverse_adaptation_is_inverse(self, method):
        forward = adaptation_matrix(method, Illuminant.D65, Illuminant.F2)
        backward = adaptation_matrix(method, Illuminant.F2, Illuminant.D65)
        assert (forward @ backward).isclose(Matrix3.identity(), atol=1e-9)

    def test_cone_matrices(self):
        assert ChromaticAdaptationMethod.XYZ_SCALING.matrix == Matrix3.identity()
        assert ChromaticAdaptationMethod.BRADFORD.matrix[1, 2] == 0.0367
