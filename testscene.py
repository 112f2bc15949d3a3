import unittest
import numpy as np
from utils import vec, normalize
from materials import Material
from geometry import Sphere, Plane, Triangle, no_hit
from ray import Ray, Camera
from scene import Scene, PointLight, DirectionalLight, AreaLight


class TestSceneIntersect(unittest.TestCase):

    def test_nearest_hit_wins(self):
        near = Material(vec([1, 0, 0]))
        far = Material(vec([0, 0, 1]))
        # listed far-first so order does not decide the answer
        scene = Scene([
            Sphere(vec([0, 0, -6]), 1.0, far),
            Sphere(vec([0, 0, -3]), 1.0, near),
        ])
        hit = scene.intersect(Ray(vec([0, 0, 0]), vec([0, 0, -1])))
        self.assertAlmostEqual(hit.t, 2.0)
        self.assertIs(hit.material, near)

    def test_empty_scene(self):
        scene = Scene([])
        self.assertIs(scene.intersect(Ray(vec([0, 0, 0]), vec([0, 0, -1]))), no_hit)

    def test_no_self_hit(self):
        scene = Scene([Sphere(vec([0, 0, -3]), 1.0, None)])
        # leaving the surface outward
        self.assertIs(scene.intersect(Ray(vec([0, 0, -2]), vec([0, 0, 1]))), no_hit)
        # going in, the far side is the first hit
        hit = scene.intersect(Ray(vec([0, 0, -2]), vec([0, 0, -1])))
        self.assertAlmostEqual(hit.t, 2.0)

    def test_scene_contents(self):
        scene = Scene([Sphere(vec([0, 0, 0]), 1.0, None)], bg_color=vec([2, -1, 0.5]))
        self.assertIsInstance(scene.surfs, tuple)
        self.assertIsInstance(scene.lights, tuple)
        self.assertIsInstance(scene.camera, Camera)
        np.testing.assert_array_equal(scene.bg_color, [1, 0, 0.5])


class TestBVH(unittest.TestCase):

    def make_surfs(self):
        rng = np.random.default_rng(0)
        mat = Material(vec([0.5, 0.5, 0.5]))
        surfs = []
        for center in rng.uniform(-5, 5, size=(30, 3)):
            surfs.append(Sphere(center, rng.uniform(0.2, 1.0), mat))
        for center in rng.uniform(-5, 5, size=(30, 3)):
            surfs.append(Triangle(center + rng.uniform(-1, 1, size=(3, 3)), mat))
        surfs.append(Plane(vec([0, -6, 0]), vec([0, 1, 0]), mat))
        return surfs

    def test_matches_linear_scan(self):
        surfs = self.make_surfs()
        linear = Scene(surfs)
        accelerated = Scene(surfs, use_bvh=True)
        self.assertIsNotNone(accelerated.bvh_root)
        self.assertEqual(len(accelerated.unbounded), 1)

        rng = np.random.default_rng(1)
        n_hits = 0
        for _ in range(200):
            origin = rng.uniform(-8, 8, size=3)
            target = rng.uniform(-5, 5, size=3)
            ray = Ray(origin, target - origin)
            expected = linear.intersect(ray)
            actual = accelerated.intersect(ray)
            self.assertEqual(expected.t == np.inf, actual.t == np.inf)
            if expected.t < np.inf:
                n_hits += 1
                self.assertAlmostEqual(expected.t, actual.t)
                np.testing.assert_allclose(expected.point, actual.point)
        self.assertGreater(n_hits, 0)

    def test_unbounded_only(self):
        scene = Scene([Plane(vec([0, 0, 0]), vec([0, 1, 0]), None)], use_bvh=True)
        self.assertIsNone(scene.bvh_root)
        hit = scene.intersect(Ray(vec([0, 1, 0]), vec([0, -1, 0])))
        self.assertAlmostEqual(hit.t, 1.0)


class TestCameraRays(unittest.TestCase):

    def test_pixel_centers(self):
        scene = Scene([])
        ray = scene.cast_camera_ray(0, 0, 2, 2)
        np.testing.assert_almost_equal(ray.origin, [0, 0, 0])
        np.testing.assert_almost_equal(ray.direction, normalize(vec([-0.5, 0.5, -1])))
        ray = scene.cast_camera_ray(1, 1, 2, 2)
        np.testing.assert_almost_equal(ray.direction, normalize(vec([0.5, -0.5, -1])))

    def test_image_aspect(self):
        scene = Scene([])
        ray = scene.cast_camera_ray(0, 0, 4, 2)
        np.testing.assert_almost_equal(ray.direction, normalize(vec([-1.5, 0.5, -1])))

    def test_deterministic(self):
        scene = Scene([], camera=Camera(vec([1, 2, 3]), target=vec([0, 0, 0]), vfov=40))
        a = scene.cast_camera_ray(3, 5, 16, 9)
        b = scene.cast_camera_ray(3, 5, 16, 9)
        np.testing.assert_array_equal(a.origin, b.origin)
        np.testing.assert_array_equal(a.direction, b.direction)


class TestLights(unittest.TestCase):

    def test_point_light_inverse_square(self):
        light = PointLight(vec([0, 2, 0]), 8.0)
        [(direction, dist, radiance)] = light.samples(vec([0, 0, 0]))
        np.testing.assert_almost_equal(direction, [0, 1, 0])
        self.assertAlmostEqual(dist, 2.0)
        self.assertAlmostEqual(radiance, 2.0)

    def test_point_light_attenuation(self):
        light = PointLight(vec([0, 2, 0]), vec([8, 4, 2]), attenuation=(1, 0, 0))
        [(_, _, radiance)] = light.samples(vec([0, 0, 0]))
        np.testing.assert_almost_equal(radiance, [8, 4, 2])
        light = PointLight(vec([0, 2, 0]), 6.0, attenuation=(1, 1, 0))
        [(_, _, radiance)] = light.samples(vec([0, 0, 0]))
        self.assertAlmostEqual(radiance, 2.0)
        with self.assertRaises(ValueError):
            PointLight(vec([0, 0, 0]), 1.0, attenuation=(0, 0, 0))
        with self.assertRaises(ValueError):
            PointLight(vec([0, 0, 0]), 1.0, attenuation=(1, -1, 0))

    def test_point_at_light(self):
        light = PointLight(vec([0, 2, 0]), 1.0)
        self.assertEqual(light.samples(vec([0, 2, 0])), [])

    def test_directional_light(self):
        light = DirectionalLight(vec([0, -2, 0]), vec([1, 1, 1]))
        [(direction, dist, radiance)] = light.samples(vec([5, 5, 5]))
        np.testing.assert_almost_equal(direction, [0, 1, 0])
        self.assertEqual(dist, np.inf)
        np.testing.assert_array_equal(radiance, [1, 1, 1])

    def test_area_light_grid(self):
        light = AreaLight(vec([-1, 4, -1]), vec([2, 0, 0]), vec([0, 0, 2]), vec([9, 9, 9]),
                          samples=3, attenuation=(1, 0, 0))
        samples = light.samples(vec([0, 0, 0]))
        self.assertEqual(len(samples), 9)
        np.testing.assert_almost_equal(np.mean(light.points, axis=0), [0, 4, 0])
        np.testing.assert_almost_equal(sum(r for _, _, r in samples), [9, 9, 9])
        # same points every time
        again = light.samples(vec([0, 0, 0]))
        for (d1, t1, _), (d2, t2, _) in zip(samples, again):
            np.testing.assert_array_equal(d1, d2)
            self.assertEqual(t1, t2)

    def test_area_light_needs_samples(self):
        with self.assertRaises(ValueError):
            AreaLight(vec([0, 0, 0]), vec([1, 0, 0]), vec([0, 0, 1]), 1.0, samples=0)


if __name__ == '__main__':
    unittest.main()
