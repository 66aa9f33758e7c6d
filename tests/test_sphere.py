"""Unit tests for sphere intersection.

Tests cover:
- Sphere dataclass validation
- Ray hitting sphere from outside (front face)
- Ray missing sphere
- Ray starting inside sphere (back face)
- Accepted interval [t_min, t_max]
- Unnormalized ray directions
"""

import math

import pytest
import taichi as ti


def _hit(origin, direction, center, radius, t_min, t_max):
    """Run hit_sphere in a kernel and return the record as a dict."""
    from src.pathtracer.core.ray import Ray, vec3
    from src.pathtracer.geometry.sphere import hit_sphere

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.field(dtype=ti.math.vec3, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, c: vec3, r: ti.f32, t_min: ti.f32, t_max: ti.f32):
        record = hit_sphere(Ray(origin=o, direction=d), c, r, t_min, t_max)
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal
        front_face[None] = record.front_face

    test_kernel(vec3(origin), vec3(direction), vec3(center), radius, t_min, t_max)
    return {
        "hit": hit[None],
        "t": t_val[None],
        "point": tuple(point[None]),
        "normal": tuple(normal[None]),
        "front_face": front_face[None],
    }


class TestSphereBasics:
    """Tests for the Sphere dataclass."""

    def test_valid_sphere(self):
        from src.pathtracer.geometry.sphere import Sphere
        from src.pathtracer.materials.lambertian import Lambertian

        sphere = Sphere(2.0, (1.0, 2.0, 3.0), Lambertian((0.5, 0.5, 0.5)))
        assert sphere.radius == 2.0
        assert sphere.center == (1.0, 2.0, 3.0)

    @pytest.mark.parametrize("radius", [0.0, -1.0, math.inf, math.nan])
    def test_invalid_radius_raises(self, radius):
        from src.pathtracer.geometry.sphere import Sphere
        from src.pathtracer.materials.lambertian import Lambertian

        with pytest.raises(ValueError):
            Sphere(radius, (0.0, 0.0, 0.0), Lambertian((0.5, 0.5, 0.5)))

    def test_invalid_center_raises(self):
        from src.pathtracer.geometry.sphere import Sphere
        from src.pathtracer.materials.lambertian import Lambertian

        with pytest.raises(ValueError):
            Sphere(1.0, (0.0, 0.0), Lambertian((0.5, 0.5, 0.5)))


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_direct_hit(self):
        """Test ray hitting sphere head-on from outside."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, 0.001, 1000.0)

        assert rec["hit"] == 1
        # Should hit at z=1 (front of sphere), so t=4
        assert abs(rec["t"] - 4.0) < 1e-5
        assert abs(rec["point"][2] - 1.0) < 1e-5
        # Normal opposes the ray: (0, 0, 1)
        assert abs(rec["normal"][2] - 1.0) < 1e-5
        assert rec["front_face"] == 1

    def test_miss(self):
        """Test ray passing beside the sphere."""
        rec = _hit((0.0, 2.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, 0.001, 1000.0)
        assert rec["hit"] == 0

    def test_inside_hits_far_side_with_flipped_normal(self):
        """Test ray from the center hits the far wall, normal facing inward."""
        rec = _hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, 0.001, 1000.0)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 1.0) < 1e-5
        assert rec["front_face"] == 0
        # Outward normal is (0, 0, -1); flipped to oppose the ray
        assert abs(rec["normal"][2] - 1.0) < 1e-5

    def test_near_root_outside_interval_uses_far_root(self):
        """Test the far root is used when the near root is below t_min."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, 4.5, 1000.0)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 6.0) < 1e-5

    def test_t_max_is_inclusive(self):
        """Test a root exactly at t_max is accepted."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, 0.001, 4.0)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 4.0) < 1e-5

    def test_beyond_t_max_misses(self):
        """Test both roots past t_max give a miss."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, 0.001, 3.5)
        assert rec["hit"] == 0

    def test_t_min_is_inclusive(self):
        """Test a root exactly at t_min is accepted."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, 4.0, 1000.0)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 4.0) < 1e-5

    def test_unnormalized_direction(self):
        """Test t is measured in units of the given direction."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -2.0), (0.0, 0.0, 0.0), 1.0, 0.001, 1000.0)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 2.0) < 1e-5
        assert abs(rec["point"][2] - 1.0) < 1e-5

    def test_normal_is_unit_length(self):
        """Test the normal is normalized for an off-center hit."""
        rec = _hit((0.3, 0.4, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 2.0, 0.001, 1000.0)

        assert rec["hit"] == 1
        length = math.sqrt(sum(c * c for c in rec["normal"]))
        assert abs(length - 1.0) < 1e-5


class TestSpherePythonHit:
    """Tests for Sphere.hit from Python."""

    def test_hit_returns_material(self):
        from src.pathtracer.geometry.sphere import Sphere
        from src.pathtracer.materials.metallic import Metallic

        material = Metallic((0.8, 0.8, 0.8), 0.3)
        sphere = Sphere(0.5, (0.0, 0.0, -1.0), material)

        hit = sphere.hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 0.001, math.inf)

        assert hit is not None
        assert hit.t == pytest.approx(0.5, abs=1e-5)
        assert hit.material is material
        assert hit.front_face

    def test_miss_returns_none(self):
        from src.pathtracer.geometry.sphere import Sphere
        from src.pathtracer.materials.lambertian import Lambertian

        sphere = Sphere(0.5, (0.0, 0.0, -1.0), Lambertian((0.5, 0.5, 0.5)))
        assert sphere.hit((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), 0.001, math.inf) is None

    def test_hit_exactly_at_t_max(self):
        from src.pathtracer.geometry.sphere import Sphere
        from src.pathtracer.materials.lambertian import Lambertian

        sphere = Sphere(1.0, (0.0, 0.0, 0.0), Lambertian((0.5, 0.5, 0.5)))
        hit = sphere.hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), 0.001, 4.0)

        assert hit is not None
        assert hit.t == pytest.approx(4.0, abs=1e-5)
