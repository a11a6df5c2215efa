"""Unit tests for the Dielectric material module.

Tests cover:
- Straight pass-through for matched indices
- Total internal reflection (TIR)
- Schlick reflection probability at normal incidence
- Attenuation is always white and the ray always scatters
- Material registry operations and index validation
"""

import math

import numpy as np
import pytest
import taichi as ti


class TestRefraction:
    """Tests for the refracted branch."""

    @pytest.mark.parametrize("front_face", [0, 1])
    def test_index_one_passes_straight_through(self, front_face):
        """Test that index 1.0 at normal incidence continues unchanged."""
        from pathlite.materials.dielectric import scatter_dielectric, vec3

        result_dir = ti.Vector.field(3, dtype=ti.f64, shape=())
        result_att = ti.Vector.field(3, dtype=ti.f64, shape=())
        result_scatter = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel(front_face: ti.i32):
            direction, attenuation, did_scatter = scatter_dielectric(
                1.0, vec3(0.0, 0.0, -1.0), vec3(0.0, 0.0, 1.0), front_face
            )
            result_dir[None] = direction
            result_att[None] = attenuation
            result_scatter[None] = did_scatter

        test_kernel(front_face)
        d = result_dir[None]
        a = result_att[None]
        assert (d[0], d[1], d[2]) == pytest.approx((0.0, 0.0, -1.0), abs=1e-6)
        assert (a[0], a[1], a[2]) == pytest.approx((1.0, 1.0, 1.0))
        assert result_scatter[None] == 1

    def test_incident_direction_is_normalized(self):
        """Test that a long incident direction yields a unit result."""
        from pathlite.materials.dielectric import scatter_dielectric, vec3

        result_dir = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            direction, attenuation, did_scatter = scatter_dielectric(
                1.0, vec3(0.0, -5.0, 0.0), vec3(0.0, 1.0, 0.0), 1
            )
            result_dir[None] = direction

        test_kernel()
        d = result_dir[None]
        assert (d[0], d[1], d[2]) == pytest.approx((0.0, -1.0, 0.0), abs=1e-6)

    def test_refraction_ratio(self):
        """Test 1/index entering and index leaving the material."""
        from pathlite.materials.dielectric import refraction_ratio

        result = ti.field(dtype=ti.f64, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = refraction_ratio(1.5, 1)
            result[1] = refraction_ratio(1.5, 0)

        test_kernel()
        assert result[0] == pytest.approx(1.0 / 1.5)
        assert result[1] == pytest.approx(1.5)


class TestReflection:
    """Tests for total internal reflection and Schlick reflection."""

    def test_total_internal_reflection(self):
        """Test that a steep ray leaving glass always reflects."""
        from pathlite.materials.dielectric import scatter_dielectric, vec3

        num_samples = 100
        directions = ti.Vector.field(3, dtype=ti.f64, shape=num_samples)
        s = math.sin(math.radians(60.0))
        c = math.cos(math.radians(60.0))

        @ti.kernel
        def test_kernel():
            for i in directions:
                # Inside glass, normal flipped to face the ray
                direction, attenuation, did_scatter = scatter_dielectric(
                    1.5, vec3(s, -c, 0.0), vec3(0.0, 1.0, 0.0), 0
                )
                directions[i] = direction

        test_kernel()
        dirs = directions.to_numpy()
        assert np.allclose(dirs, [s, c, 0.0], atol=1e-5)

    def test_schlick_reflection_fraction_at_normal_incidence(self):
        """Test that about 4% of rays reflect off glass head-on."""
        from pathlite.materials.dielectric import scatter_dielectric, vec3

        num_samples = 4000
        reflected = ti.field(dtype=ti.i32, shape=num_samples)

        @ti.kernel
        def test_kernel():
            for i in reflected:
                direction, attenuation, did_scatter = scatter_dielectric(
                    1.5, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0), 1
                )
                reflected[i] = 1 if direction.y > 0.0 else 0

        test_kernel()
        fraction = reflected.to_numpy().mean()
        assert 0.02 < fraction < 0.06


class TestDielectricRegistry:
    """Tests for the dielectric material registry."""

    def test_add_default_and_custom(self):
        """Test default index and stored values."""
        from pathlite.materials.dielectric import (
            add_dielectric_material,
            dielectric_indices,
            get_dielectric_material_count,
        )

        glass = add_dielectric_material()
        bubble = add_dielectric_material(1.0 / 1.33)

        assert get_dielectric_material_count() == 2
        assert dielectric_indices[glass] == pytest.approx(1.5)
        assert dielectric_indices[bubble] == pytest.approx(1.0 / 1.33)

    @pytest.mark.parametrize("index", [0.0, -1.5])
    def test_non_positive_index_rejected(self, index):
        """Test that refraction index <= 0 raises ValueError."""
        from pathlite.materials.dielectric import add_dielectric_material

        with pytest.raises(ValueError, match="must be positive"):
            add_dielectric_material(index)

    def test_scatter_by_id(self):
        """Test scatter_dielectric_by_id with a matched-index material."""
        from pathlite.materials.dielectric import (
            add_dielectric_material,
            scatter_dielectric_by_id,
            vec3,
        )

        idx = add_dielectric_material(1.0)
        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel(i: ti.i32):
            direction, attenuation, did_scatter = scatter_dielectric_by_id(
                i, vec3(0.0, 0.0, -1.0), vec3(0.0, 0.0, 1.0), 1
            )
            result[None] = direction

        test_kernel(idx)
        r = result[None]
        assert (r[0], r[1], r[2]) == pytest.approx((0.0, 0.0, -1.0), abs=1e-6)
