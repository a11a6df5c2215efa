"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside (front face)
- Ray missing sphere
- Ray starting inside sphere (back face)
- Roots outside the accepted interval
- Unnormalized ray directions
"""

import pytest
import taichi as ti


def _run_hit(origin, direction, center, radius, t_min=0.0, t_max=1e30, material_id=3):
    """Intersect one ray with one sphere and return the record as a dict."""
    from pathlite.core.interval import Interval
    from pathlite.core.ray import Ray, vec3
    from pathlite.geometry.sphere import Sphere, hit_sphere

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f64, shape=())
    point = ti.Vector.field(3, dtype=ti.f64, shape=())
    normal = ti.Vector.field(3, dtype=ti.f64, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())
    mat_id = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(
        origin: vec3, direction: vec3, center: vec3, radius: ti.f64, t_min: ti.f64, t_max: ti.f64
    ):
        ray = Ray(origin=origin, direction=direction)
        sphere = Sphere(center=center, radius=radius, material_id=material_id)
        record = hit_sphere(ray, sphere, Interval(min=t_min, max=t_max))
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal
        front_face[None] = record.front_face
        mat_id[None] = record.material_id

    test_kernel(vec3(*origin), vec3(*direction), vec3(*center), radius, t_min, t_max)
    return {
        "hit": hit[None],
        "t": t_val[None],
        "point": tuple(point[None].to_numpy()),
        "normal": tuple(normal[None].to_numpy()),
        "front_face": front_face[None],
        "material_id": mat_id[None],
    }


class TestSphereBasics:
    """Tests for Sphere dataclass and make_sphere."""

    def test_make_sphere_clamps_negative_radius(self):
        """Test that make_sphere clamps a negative radius to zero."""
        from pathlite.geometry.sphere import make_sphere, vec3

        radius_result = ti.field(dtype=ti.f64, shape=2)

        @ti.kernel
        def test_kernel():
            radius_result[0] = make_sphere(vec3(0.0, 0.0, 0.0), -2.0, 0).radius
            radius_result[1] = make_sphere(vec3(0.0, 0.0, 0.0), 0.5, 0).radius

        test_kernel()
        assert radius_result[0] == 0.0
        assert radius_result[1] == pytest.approx(0.5)


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_direct_hit_from_outside(self):
        """Test the canonical hit: sphere at (0,0,-1) r=0.5, ray down -z."""
        rec = _run_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -1.0), 0.5)

        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(0.5, abs=1e-6)
        assert rec["point"] == pytest.approx((0.0, 0.0, -0.5), abs=1e-6)
        assert rec["normal"] == pytest.approx((0.0, 0.0, 1.0), abs=1e-6)
        assert rec["front_face"] == 1
        assert rec["material_id"] == 3

    def test_miss(self):
        """Test a ray passing beside the sphere."""
        rec = _run_hit((0.0, 2.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -1.0), 0.5)

        assert rec["hit"] == 0

    def test_hit_from_inside_is_back_face(self):
        """Test a ray starting at the center: far root, normal flipped."""
        rec = _run_hit((0.0, 0.0, -1.0), (0.0, 0.0, -1.0), (0.0, 0.0, -1.0), 0.5)

        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(0.5, abs=1e-6)
        assert rec["point"] == pytest.approx((0.0, 0.0, -1.5), abs=1e-6)
        # Outward normal is (0,0,-1); it must face the incoming ray
        assert rec["normal"] == pytest.approx((0.0, 0.0, 1.0), abs=1e-6)
        assert rec["front_face"] == 0

    def test_sphere_behind_ray_is_missed(self):
        """Test that both roots negative means no hit for t_min = 0."""
        rec = _run_hit((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 0.0, -1.0), 0.5)

        assert rec["hit"] == 0

    def test_near_root_outside_interval_uses_far_root(self):
        """Test that the far root is used when the near root is below t_min."""
        rec = _run_hit(
            (0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -1.0), 0.5, t_min=0.6
        )

        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(1.5, abs=1e-6)
        assert rec["front_face"] == 0

    def test_both_roots_beyond_t_max(self):
        """Test that roots past t_max are rejected."""
        rec = _run_hit(
            (0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -1.0), 0.5, t_max=0.4
        )

        assert rec["hit"] == 0

    def test_root_on_interval_boundary_is_accepted(self):
        """Test that containment is closed at both ends."""
        rec = _run_hit(
            (0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -1.0), 0.5, t_max=0.5
        )

        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(0.5, abs=1e-6)

    def test_unnormalized_direction(self):
        """Test that t scales with direction length while the point does not."""
        rec = _run_hit((0.0, 0.0, 0.0), (0.0, 0.0, -2.0), (0.0, 0.0, -1.0), 0.5)

        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(0.25, abs=1e-6)
        assert rec["point"] == pytest.approx((0.0, 0.0, -0.5), abs=1e-6)
        assert rec["normal"] == pytest.approx((0.0, 0.0, 1.0), abs=1e-6)

    def test_oblique_hit_normal_is_unit(self):
        """Test that the stored normal is unit length for an off-axis hit."""
        rec = _run_hit((0.3, 0.2, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -2.0), 1.0)

        assert rec["hit"] == 1
        n = rec["normal"]
        assert n[0] ** 2 + n[1] ** 2 + n[2] ** 2 == pytest.approx(1.0, abs=1e-5)
        assert n[2] > 0.0
