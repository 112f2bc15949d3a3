import unittest
import numpy as np
from utils import vec, normalize
from materials import Material
from geometry import Hit, Sphere, Plane, Triangle
from ray import Ray, EPSILON
from scene import Scene, PointLight, AreaLight
from tracer import shadow_transmission, direct_light, refracted_ray, trace


class CountingScene(Scene):
    """Scene that counts intersection queries."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.n_queries = 0

    def intersect(self, ray):
        self.n_queries += 1
        return super().intersect(ray)


def floor_hit(material):
    # the origin on an upward facing floor, seen from straight above
    ray = Ray(vec([0, 1, 0]), vec([0, -1, 0]))
    return ray, Hit(1.0, vec([0, 0, 0]), vec([0, 1, 0]), material)


class TestMaterial(unittest.TestCase):

    def test_defaults(self):
        mat = Material(vec([0.2, 0.4, 0.6]))
        np.testing.assert_array_equal(mat.k_a, mat.k_d)
        self.assertFalse(mat.is_reflective)
        self.assertFalse(mat.is_refractive)

    def test_invalid_coefficients(self):
        with self.assertRaises(ValueError):
            Material(vec([1, 1, 1]), k_m=1.5)
        with self.assertRaises(ValueError):
            Material(vec([1, 1, 1]), k_t=-0.1, ior=1.5)
        with self.assertRaises(ValueError):
            Material(vec([1, 1, 1]), k_m=0.6, k_t=0.6, ior=1.5)
        with self.assertRaises(ValueError):
            Material(vec([1, 1, 1]), k_t=0.5)
        with self.assertRaises(ValueError):
            Material(vec([1, 1, 1]), k_t=0.5, ior=0.0)


class TestDirectLight(unittest.TestCase):

    def test_diffuse_overhead(self):
        ray, hit = floor_hit(Material(vec([0.5, 0.5, 0.5])))
        scene = Scene([], [PointLight(vec([0, 1, 0]), 1.0)])
        np.testing.assert_allclose(direct_light(ray, hit, scene), [0.5, 0.5, 0.5])

    def test_diffuse_oblique(self):
        ray, hit = floor_hit(Material(vec([0.5, 0.5, 0.5])))
        # distance 2 at 60 degrees off the normal
        scene = Scene([], [PointLight(vec([0, 1, np.sqrt(3)]), 4.0)])
        np.testing.assert_allclose(direct_light(ray, hit, scene), [0.25, 0.25, 0.25])

    def test_specular_highlight(self):
        ray, hit = floor_hit(Material(vec([0, 0, 0]), k_s=0.5, p=50))
        scene = Scene([], [PointLight(vec([0, 1, 0]), 1.0)])
        np.testing.assert_allclose(direct_light(ray, hit, scene), [0.5, 0.5, 0.5])

    def test_light_behind_surface(self):
        ray, hit = floor_hit(Material(vec([1, 1, 1]), k_s=1.0))
        scene = Scene([], [PointLight(vec([0, -1, 0]), 1.0)])
        np.testing.assert_array_equal(direct_light(ray, hit, scene), [0, 0, 0])

    def test_opaque_shadow(self):
        ray, hit = floor_hit(Material(vec([0.5, 0.5, 0.5])))
        blocker = Sphere(vec([0, 0.5, 0]), 0.2, Material(vec([1, 1, 1])))
        scene = Scene([blocker], [PointLight(vec([0, 1, 0]), 1.0)])
        np.testing.assert_array_equal(direct_light(ray, hit, scene), [0, 0, 0])

    def test_blocker_beyond_light(self):
        ray, hit = floor_hit(Material(vec([0.5, 0.5, 0.5])))
        blocker = Sphere(vec([0, 3, 0]), 0.5, Material(vec([1, 1, 1])))
        scene = Scene([blocker], [PointLight(vec([0, 1, 0]), 1.0)])
        np.testing.assert_allclose(direct_light(ray, hit, scene), [0.5, 0.5, 0.5])

    def test_area_light_soft_shadow(self):
        ray, hit = floor_hit(Material(vec([0.5, 0.5, 0.5])))
        light = AreaLight(vec([-1, 4, -1]), vec([2, 0, 0]), vec([0, 0, 2]), 16.0, samples=2)
        # covers the x < 0 half of the light as seen from the origin
        half_wall = Triangle(np.array([[-0.05, 2, -5], [-0.05, 2, 5], [-10, 2, 0]]),
                             Material(vec([1, 1, 1])))
        unblocked = direct_light(ray, hit, Scene([], [light]))
        blocked = direct_light(ray, hit, Scene([half_wall], [light]))
        self.assertGreater(unblocked[0], 0)
        np.testing.assert_allclose(blocked, 0.5 * unblocked)


class TestShadowTransmission(unittest.TestCase):

    def test_unoccluded(self):
        scene = Scene([])
        t = shadow_transmission(scene, vec([0, 0, 0]), vec([0, 1, 0]), vec([0, 1, 0]), 4.0)
        self.assertEqual(t, 1.0)

    def test_opaque_blocker(self):
        scene = Scene([Sphere(vec([0, 2, 0]), 0.5, Material(vec([1, 1, 1])))])
        t = shadow_transmission(scene, vec([0, 0, 0]), vec([0, 1, 0]), vec([0, 1, 0]), 4.0)
        self.assertEqual(t, 0.0)

    def test_transparent_blocker(self):
        glass = Material(vec([0, 0, 0]), k_t=0.5, ior=1.5)
        scene = Scene([Sphere(vec([0, 2, 0]), 0.5, glass)])
        # the shadow ray crosses two surfaces of the sphere
        t = shadow_transmission(scene, vec([0, 0, 0]), vec([0, 1, 0]), vec([0, 1, 0]), 4.0)
        self.assertAlmostEqual(t, 0.25)
        # and keeps going to a directional light
        t = shadow_transmission(scene, vec([0, 0, 0]), vec([0, 1, 0]), vec([0, 1, 0]), np.inf)
        self.assertAlmostEqual(t, 0.25)


class TestTrace(unittest.TestCase):

    def test_miss_is_background(self):
        scene = Scene([], bg_color=vec([0.1, 0.2, 0.3]))
        color = trace(Ray(vec([0, 0, 0]), vec([0, 0, -1])), scene)
        np.testing.assert_array_equal(color, scene.bg_color)

    def test_ambient_only(self):
        mat = Material(vec([0.2, 0.4, 0.6]))
        scene = Scene([Sphere(vec([0, 0, -3]), 1.0, mat)], [], ambient=0.5)
        color = trace(Ray(vec([0, 0, 0]), vec([0, 0, -1])), scene)
        np.testing.assert_allclose(color, [0.1, 0.2, 0.3])

    def test_clamped(self):
        mat = Material(vec([1, 1, 1]), k_s=1.0)
        scene = Scene([Sphere(vec([0, 0, -3]), 1.0, mat)], [PointLight(vec([0, 0, 0]), 1000.0)])
        color = trace(Ray(vec([0, 0, 0]), vec([0, 0, -1])), scene)
        self.assertTrue(np.all(color >= 0))
        self.assertTrue(np.all(color <= 1))
        np.testing.assert_array_equal(color, [1, 1, 1])

    def test_facing_mirrors_terminate(self):
        mirror = Material(vec([0.5, 0.5, 0.5]), k_m=1.0)
        for max_depth in [0, 1, 5]:
            scene = CountingScene([
                Plane(vec([-2, 0, 0]), vec([1, 0, 0]), mirror),
                Plane(vec([2, 0, 0]), vec([-1, 0, 0]), mirror),
            ], [])
            color = trace(Ray(vec([0, 0, 0]), vec([1, 0, 0])), scene, max_depth=max_depth)
            # one query per bounce, nothing past the depth limit
            self.assertEqual(scene.n_queries, max_depth + 1)
            np.testing.assert_array_equal(color, [0, 0, 0])

    def test_mirror_blend(self):
        half_mirror = Material(vec([0, 0, 0]), k_m=0.5)
        scene = Scene([Plane(vec([0, 0, 0]), vec([0, 1, 0]), half_mirror)], [],
                      bg_color=vec([0.2, 0.4, 0.8]))
        color = trace(Ray(vec([0, 1, 0]), vec([1, -1, 0])), scene)
        np.testing.assert_allclose(color, [0.1, 0.2, 0.4])

    def test_index_matched_glass(self):
        clear = Material(vec([1, 1, 1]), k_t=1.0, ior=1.0)
        scene = Scene([Sphere(vec([0, 0, -3]), 1.0, clear)], [], bg_color=vec([0.2, 0.4, 0.8]))
        ray = Ray(vec([0.3, 0, 0]), vec([0, 0, -1]))
        # entering and leaving the sphere takes two bounces
        np.testing.assert_allclose(trace(ray, scene, max_depth=2), [0.2, 0.4, 0.8])
        np.testing.assert_array_equal(trace(ray, scene, max_depth=1), [0, 0, 0])


class TestRefraction(unittest.TestCase):

    def test_entering_glass(self):
        glass = Material(vec([0, 0, 0]), k_t=1.0, ior=1.5)
        ray = Ray(vec([-1, 1, 0]), vec([1, -1, 0]))
        hit = Hit(np.sqrt(2), vec([0, 0, 0]), vec([0, 1, 0]), glass, front_face=True)
        bent = refracted_ray(ray, hit)
        self.assertAlmostEqual(bent.direction[0], np.sin(np.pi / 4) / 1.5)
        self.assertLess(bent.direction[1], 0)
        # starts just below the surface
        np.testing.assert_allclose(bent.origin, [0, -EPSILON, 0])

    def test_total_internal_reflection(self):
        glass = Material(vec([0, 0, 0]), k_t=1.0, ior=1.5)
        # inside the glass, grazing the surface
        ray = Ray(vec([-1, 0.2, 0]), normalize(vec([1, -0.2, 0])))
        hit = Hit(1.0, vec([0, 0, 0]), vec([0, 1, 0]), glass, front_face=False)
        self.assertIsNone(refracted_ray(ray, hit))

    def test_total_internal_reflection_traced(self):
        # a ray leaving a glass ball at a grazing angle is mirrored back inside
        glass = Material(vec([0, 0, 0]), k_t=1.0, ior=1.5)
        scene = Scene([Sphere(vec([0, 0, 0]), 1.0, glass)], [], bg_color=vec([1, 1, 1]))
        ray = Ray(vec([0, 0, 0.9]), vec([1, 0, 0]))
        color = trace(ray, scene, max_depth=1)
        np.testing.assert_array_equal(color, [0, 0, 0])


if __name__ == '__main__':
    unittest.main()
