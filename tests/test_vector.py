"""Unit tests for vector utilities.

Tests cover:
- Construction and arithmetic producing new vectors
- Dot product, squared length and length
- Normalization, including the zero-vector guard
"""

import math

import numpy as np
import pytest


class TestVectorBasics:
    """Tests for vector construction and arithmetic."""

    def test_vec3_creates_float64_array(self):
        """Test that vec3 builds a (3,) float64 array."""
        from src.raymarcher.core.vector import vec3

        v = vec3(1, 2, 3)
        assert v.shape == (3,)
        assert v.dtype == np.float64
        assert np.array_equal(v, [1.0, 2.0, 3.0])

    def test_arithmetic_returns_new_vectors(self):
        """Test that add/sub/scale leave operands untouched."""
        from src.raymarcher.core.vector import vec3

        a = vec3(1.0, 2.0, 3.0)
        b = vec3(0.5, 0.5, 0.5)

        assert np.allclose(a + b, [1.5, 2.5, 3.5])
        assert np.allclose(a - b, [0.5, 1.5, 2.5])
        assert np.allclose(a * 2.0, [2.0, 4.0, 6.0])
        assert np.allclose(a / 2.0, [0.5, 1.0, 1.5])
        assert np.array_equal(a, [1.0, 2.0, 3.0])

    def test_as_vec3_accepts_tuples(self):
        """Test conversion from tuples."""
        from src.raymarcher.core.vector import as_vec3

        assert np.array_equal(as_vec3((0.0, 1.5, -4.0)), [0.0, 1.5, -4.0])

    def test_as_vec3_rejects_wrong_shape(self):
        """Test that non-3D input is rejected."""
        from src.raymarcher.core.vector import as_vec3

        with pytest.raises(ValueError):
            as_vec3((1.0, 2.0))


class TestVectorProducts:
    """Tests for dot product and norms."""

    def test_dot(self):
        """Test dot product of two vectors."""
        from src.raymarcher.core.vector import dot, vec3

        assert dot(vec3(1.0, 2.0, 3.0), vec3(4.0, -5.0, 6.0)) == pytest.approx(12.0)

    def test_length_squared_has_no_sqrt(self):
        """Test squared length is the plain sum of squares."""
        from src.raymarcher.core.vector import length_squared, vec3

        assert length_squared(vec3(1.0, 2.0, 2.0)) == 9.0

    def test_length(self):
        """Test Euclidean length."""
        from src.raymarcher.core.vector import length, vec3

        assert length(vec3(3.0, 0.0, 4.0)) == pytest.approx(5.0)


class TestNormalize:
    """Tests for normalization."""

    @pytest.mark.parametrize(
        "components",
        [(3.0, 0.0, 4.0), (-1.0, 2.0, -3.0), (1e-3, 1e-3, -1e-3), (16.0 / 9.0, 1.0, -1.0)],
    )
    def test_normalize_gives_unit_length(self, components):
        """Test that normalized vectors have unit length."""
        from src.raymarcher.core.vector import length, normalize, vec3

        v = normalize(vec3(*components))
        assert abs(length(v) - 1.0) < 1e-12

    def test_normalize_preserves_direction(self):
        """Test that normalization only rescales."""
        from src.raymarcher.core.vector import normalize, vec3

        v = normalize(vec3(0.0, 0.0, -7.0))
        assert np.allclose(v, [0.0, 0.0, -1.0])

    def test_normalize_zero_vector_raises(self):
        """Test the zero-length guard."""
        from src.raymarcher.core.vector import normalize, vec3

        with pytest.raises(ValueError, match="zero-length"):
            normalize(vec3(0.0, 0.0, 0.0))

    def test_normalize_matches_sqrt_of_squared_norm(self):
        """Test that normalize divides by sqrt of the squared norm."""
        from src.raymarcher.core.vector import length_squared, normalize, vec3

        v = vec3(1.0, 2.0, 3.0)
        expected = v / math.sqrt(length_squared(v))
        assert np.array_equal(normalize(v), expected)

    def test_as_vec3_is_annotated(self):
        """Test that as_vec3 declares its input and output types."""
        from src.raymarcher.core.vector import Vector3, as_vec3

        hints = as_vec3.__annotations__
        assert not isinstance(hints["value"], str)
        assert hints["return"] is Vector3
