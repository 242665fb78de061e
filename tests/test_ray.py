"""Unit tests for the ray module.

Tests cover:
- Ray dataclass, ray_at and make_ray
- Vector utilities (length, dot, normalize, project, reflect, clamp01)
- Python-side direction checks
"""

import math

import pytest
import taichi as ti


class TestRayBasics:
    """Tests for Ray dataclass and basic operations."""

    def test_ray_at_origin(self):
        """Test ray_at returns origin when t=0."""
        from src.prism.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 2.0) < 1e-6
        assert abs(r[2] - 3.0) < 1e-6

    def test_ray_at_positive_t(self):
        """Test ray_at computes correct point along ray."""
        from src.prism.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(0.0, 1.0, 0.0), direction=vec3(1.0, 0.0, 0.0))
            result[None] = ray_at(ray, 5.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 5.0) < 1e-6
        assert abs(r[1] - 1.0) < 1e-6
        assert abs(r[2]) < 1e-6

    def test_make_ray_normalizes(self):
        """Test make_ray produces a unit direction."""
        from src.prism.core.ray import make_ray, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(3.0, 0.0, 4.0))
            result[None] = ray.direction

        test_kernel()
        d = result[None]
        assert abs(d[0] - 0.6) < 1e-6
        assert abs(d[1]) < 1e-6
        assert abs(d[2] - 0.8) < 1e-6


class TestVectorUtilities:
    """Tests for vector helper functions."""

    def test_length_and_length_squared(self):
        """Test length and length_squared of a 3-4-12 vector."""
        from src.prism.core.ray import length, length_squared, vec3

        result = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            v = vec3(3.0, 4.0, 12.0)
            result[0] = length(v)
            result[1] = length_squared(v)

        test_kernel()
        assert abs(result[0] - 13.0) < 1e-5
        assert abs(result[1] - 169.0) < 1e-4

    def test_length_squared_zero(self):
        """Test length_squared is exactly zero for the zero vector."""
        from src.prism.core.ray import length_squared, vec3

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = length_squared(vec3(0.0, 0.0, 0.0))

        test_kernel()
        assert result[None] == 0.0

    def test_normalize(self):
        """Test normalize keeps the direction and gives unit length."""
        from src.prism.core.ray import normalize, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = normalize(vec3(0.0, -3.0, 4.0))

        test_kernel()
        n = result[None]
        assert abs(n[0]) < 1e-6
        assert abs(n[1] + 0.6) < 1e-6
        assert abs(n[2] - 0.8) < 1e-6

    def test_dot(self):
        """Test dot products of parallel, perpendicular and general vectors."""
        from src.prism.core.ray import dot, vec3

        result = ti.field(dtype=ti.f32, shape=3)

        @ti.kernel
        def test_kernel():
            result[0] = dot(vec3(1.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))
            result[1] = dot(vec3(2.0, 0.0, 0.0), vec3(-3.0, 0.0, 0.0))
            result[2] = dot(vec3(1.0, 2.0, 3.0), vec3(4.0, -5.0, 6.0))

        test_kernel()
        assert abs(result[0]) < 1e-6
        assert abs(result[1] + 6.0) < 1e-6
        assert abs(result[2] - 12.0) < 1e-5

    def test_project_onto_axis(self):
        """Test project keeps only the axial component."""
        from src.prism.core.ray import project, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = project(vec3(3.0, 4.0, 5.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        p = result[None]
        assert abs(p[0]) < 1e-6
        assert abs(p[1] - 4.0) < 1e-6
        assert abs(p[2]) < 1e-6

    def test_reflect_mirror(self):
        """Test reflection off a horizontal surface flips the vertical component."""
        from src.prism.core.ray import reflect, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 1.0) < 1e-6
        assert abs(r[2]) < 1e-6

    def test_reflect_preserves_length(self):
        """Test reflection does not change the vector's length."""
        from src.prism.core.ray import reflect, vec3

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            n = ti.math.normalize(vec3(1.0, 2.0, -0.5))
            result[None] = ti.math.length(reflect(vec3(0.3, -2.0, 1.1), n))

        test_kernel()
        expected = math.sqrt(0.3**2 + 2.0**2 + 1.1**2)
        assert abs(result[None] - expected) < 1e-5

    def test_clamp01(self):
        """Test every channel is clamped to [0, 1]."""
        from src.prism.core.ray import clamp01, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = clamp01(vec3(-0.5, 0.25, 3.0))

        test_kernel()
        c = result[None]
        assert c[0] == 0.0
        assert abs(c[1] - 0.25) < 1e-6
        assert c[2] == 1.0


class TestDirectionChecks:
    """Tests for the Python-side direction preconditions."""

    def test_check_direction_accepts_nonzero(self):
        """Test a nonzero direction is returned unchanged as floats."""
        from src.prism.core.ray import check_direction

        assert check_direction((0, 0, -2)) == (0.0, 0.0, -2.0)

    def test_check_direction_rejects_zero(self):
        """Test a zero vector raises GeometryError."""
        from src.prism.core.ray import GeometryError, check_direction

        with pytest.raises(GeometryError):
            check_direction((0.0, 0.0, 0.0))

    def test_check_direction_rejects_non_finite(self):
        """Test NaN components raise GeometryError."""
        from src.prism.core.ray import GeometryError, check_direction

        with pytest.raises(GeometryError):
            check_direction((float("nan"), 0.0, 1.0))

    def test_check_direction_rejects_wrong_size(self):
        """Test vectors without 3 components are rejected."""
        from src.prism.core.ray import GeometryError, check_direction

        with pytest.raises(GeometryError):
            check_direction((1.0, 0.0))

    def test_geometry_error_is_value_error(self):
        """Test GeometryError can be caught as ValueError."""
        from src.prism.core.ray import GeometryError

        assert issubclass(GeometryError, ValueError)

    def test_normalize_vector(self):
        """Test normalize_vector returns a unit vector."""
        from src.prism.core.ray import normalize_vector

        x, y, z = normalize_vector((0.0, 3.0, 4.0))
        assert abs(x) < 1e-12
        assert abs(y - 0.6) < 1e-12
        assert abs(z - 0.8) < 1e-12
