"""Unit tests for the vector algebra helpers.

Tests cover:
- Componentwise operations (add, subtract, multiply, divide, scale, power)
- Dot and cross products
- Length and normalization
"""

import taichi as ti


def _run_vec3(build):
    """Evaluate a vec3 expression inside a kernel and return it as a list."""
    result = ti.Vector.field(3, dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel():
        result[None] = build()

    test_kernel()
    v = result[None]
    return [v[0], v[1], v[2]]


class TestComponentwise:
    """Tests for componentwise operations."""

    def test_add_subtract(self):
        from lumen.core.vector import add, subtract, vec3

        @ti.func
        def build():
            return subtract(add(vec3(1.0, 2.0, 3.0), vec3(4.0, 5.0, 6.0)), vec3(0.5, 0.5, 0.5))

        assert _run_vec3(build) == [4.5, 6.5, 8.5]

    def test_multiply_is_componentwise(self):
        from lumen.core.vector import multiply, vec3

        @ti.func
        def build():
            return multiply(vec3(1.0, 2.0, 3.0), vec3(2.0, -1.0, 0.5))

        assert _run_vec3(build) == [2.0, -2.0, 1.5]

    def test_divide_is_componentwise(self):
        from lumen.core.vector import divide, vec3

        @ti.func
        def build():
            return divide(vec3(4.0, 9.0, 1.0), vec3(2.0, 3.0, 4.0))

        assert _run_vec3(build) == [2.0, 3.0, 0.25]

    def test_scale(self):
        from lumen.core.vector import scale, vec3

        @ti.func
        def build():
            return scale(vec3(1.0, -2.0, 0.5), 4.0)

        assert _run_vec3(build) == [4.0, -8.0, 2.0]

    def test_power(self):
        from lumen.core.vector import power, vec3

        @ti.func
        def build():
            return power(vec3(4.0, 9.0, 16.0), 0.5)

        v = _run_vec3(build)
        assert abs(v[0] - 2.0) < 1e-5
        assert abs(v[1] - 3.0) < 1e-5
        assert abs(v[2] - 4.0) < 1e-5


class TestProducts:
    """Tests for dot and cross products."""

    def test_dot(self):
        from lumen.core.vector import dot, vec3

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = dot(vec3(1.0, 2.0, 3.0), vec3(4.0, -5.0, 6.0))

        test_kernel()
        assert abs(result[None] - 12.0) < 1e-5

    def test_cross_of_axes(self):
        from lumen.core.vector import cross, vec3

        @ti.func
        def build():
            return cross(vec3(1.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))

        assert _run_vec3(build) == [0.0, 0.0, 1.0]


class TestLength:
    """Tests for length and normalization."""

    def test_length_and_length_squared(self):
        from lumen.core.vector import length, length_squared, vec3

        result = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            v = vec3(3.0, 0.0, 4.0)
            result[0] = length(v)
            result[1] = length_squared(v)

        test_kernel()
        assert abs(result[0] - 5.0) < 1e-5
        assert abs(result[1] - 25.0) < 1e-5

    def test_normalize_has_unit_length(self):
        from lumen.core.vector import length, normalize, vec3

        result = ti.field(dtype=ti.f32, shape=4)

        @ti.kernel
        def test_kernel():
            vectors = ti.Matrix(
                [[3.0, 0.0, 4.0], [1.0, 1.0, 1.0], [-2.0, 7.0, 0.5], [1e-3, 0.0, 0.0]]
            )
            for k in ti.static(range(4)):
                v = vec3(vectors[k, 0], vectors[k, 1], vectors[k, 2])
                result[k] = length(normalize(v))

        test_kernel()
        for k in range(4):
            assert abs(result[k] - 1.0) < 1e-5

    def test_normalize_preserves_direction(self):
        from lumen.core.vector import normalize, vec3

        @ti.func
        def build():
            return normalize(vec3(0.0, -10.0, 0.0))

        v = _run_vec3(build)
        assert abs(v[0]) < 1e-6
        assert abs(v[1] + 1.0) < 1e-6
        assert abs(v[2]) < 1e-6
