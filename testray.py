import unittest
import numpy as np
from utils import normalize, vec, reflect, refract
from ray import Ray, Camera, EPSILON
from geometry import Sphere, Plane, Triangle, AABB, no_hit

def assert_direction_matches(v, w):
    np.testing.assert_almost_equal(normalize(v), normalize(w))


def flipy_vec(vect):
    v = vec(vect);
    v[1] = 1-v[1];
    return v;

class TestVectors(unittest.TestCase):

    def test_normalize(self):
        np.testing.assert_almost_equal(normalize(vec([3, 0, 4])), [0.6, 0, 0.8])

    def test_normalize_zero_vector_raises(self):
        with self.assertRaises(ValueError):
            normalize(vec([0, 0, 0]))

    def test_reflect(self):
        np.testing.assert_almost_equal(reflect(vec([1, -1, 0]), vec([0, 1, 0])), [1, 1, 0])

    def test_refract_straight_through(self):
        d = refract(vec([0, -1, 0]), vec([0, 1, 0]), 1 / 1.5)
        np.testing.assert_almost_equal(d, [0, -1, 0])

    def test_refract_snell(self):
        # 45 degrees in air into glass
        d = refract(normalize(vec([1, -1, 0])), vec([0, 1, 0]), 1 / 1.5)
        sin_t = d[0]
        self.assertAlmostEqual(sin_t, np.sin(np.pi / 4) / 1.5)
        self.assertLess(d[1], 0)

    def test_total_internal_reflection(self):
        # leaving glass at a grazing angle
        self.assertIsNone(refract(normalize(vec([1, -0.2, 0])), vec([0, 1, 0]), 1.5))


class TestRay(unittest.TestCase):

    def test_direction_is_normalized(self):
        ray = Ray(vec([1, 2, 3]), vec([0, 0, -5]))
        np.testing.assert_almost_equal(ray.direction, [0, 0, -1])
        np.testing.assert_almost_equal(ray.at(2.0), [1, 2, 1])
        self.assertEqual(ray.start, EPSILON)
        self.assertEqual(ray.end, np.inf)

    def test_zero_direction_raises(self):
        with self.assertRaises(ValueError):
            Ray(vec([0, 0, 0]), vec([0, 0, 0]))


class TestSphereIntersect(unittest.TestCase):

    def confirm_hit(self, sphere, ray):
        # make sure hit is self-consistent, then return it
        hit = sphere.intersect(ray)
        self.assertLess(hit.t, np.inf)
        np.testing.assert_almost_equal(ray.origin + hit.t * ray.direction, hit.point)
        np.testing.assert_almost_equal(normalize(hit.point - sphere.center), hit.normal)
        self.assertAlmostEqual(np.linalg.norm(hit.point - sphere.center), sphere.radius)
        self.assertIs(hit.material, sphere.material)
        self.assertTrue(hit.front_face)
        return hit

    def test_unitsphere_hits(self):
        unit_sphere = Sphere(np.array([0,0,0]), 1.0, None)
        # dead center hit
        hit = self.confirm_hit(unit_sphere, Ray(vec([2.0,0.0,0.0]), vec([-1.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 1.0)
        # dead center with non-unit direction; the ray normalizes it
        hit = self.confirm_hit(unit_sphere, Ray(vec([3.0,0.0,0.0]), vec([-2.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 2.0)
        # off center hit
        hit = self.confirm_hit(unit_sphere, Ray(vec([1.0,0.5,0.0]), vec([-1.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 1 - np.sin(np.pi/3))
        # center hit from off axis
        hit = self.confirm_hit(unit_sphere, Ray(vec([2.0,3.0,4.0]), vec([-2.0,-3.0,-4.0])))
        self.assertAlmostEqual(hit.t, np.sqrt(29) - 1)

    def test_distance_minus_radius(self):
        for radius in [0.5, 1.0, 3.0]:
            sphere = Sphere(vec([1, -2, 3]), radius, None)
            for d in [radius + 0.25, 2 * radius, 10.0, 100.0]:
                direction = normalize(vec([1, 2, -2]))
                ray = Ray(sphere.center + d * direction, -direction)
                hit = self.confirm_hit(sphere, ray)
                self.assertAlmostEqual(hit.t, d - radius)

    def test_unitsphere_misses(self):
        unit_sphere = Sphere(vec([0,0,0]), 1.0, None)
        # on axis miss
        hit = unit_sphere.intersect(Ray(vec([2.0,3.0,0.0]), vec([-1.0,0.0,0.0])))
        self.assertEqual(hit.t, np.inf)
        # sphere behind the ray origin
        hit = unit_sphere.intersect(Ray(vec([2.0,0.0,0.0]), vec([1.0,0.0,0.0])))
        self.assertIs(hit, no_hit)

    def test_inside_hit_faces_ray(self):
        unit_sphere = Sphere(vec([0,0,0]), 1.0, None)
        hit = unit_sphere.intersect(Ray(vec([0,0,0]), vec([1,0,0])))
        self.assertAlmostEqual(hit.t, 1.0)
        self.assertFalse(hit.front_face)
        np.testing.assert_almost_equal(hit.normal, [-1, 0, 0])

    def test_ray_interval(self):
        unit_sphere = Sphere(vec([0,0,0]), 1.0, None)
        ray = Ray(vec([5,0,0]), vec([-1,0,0]), end=3.0)
        self.assertIs(unit_sphere.intersect(ray), no_hit)

    def test_nonunit_hits(self):
        # all the same as the first case, but scaled by 3 and shifted by (-1, -5, -7)
        sphere = Sphere(vec([-1,-5,-7]), 3.0, None)
        hit = self.confirm_hit(sphere, Ray(vec([5.0,-5.0,-7.0]), vec([-3.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 3.0)
        hit = self.confirm_hit(sphere, Ray(vec([8.0,-5.0,-7.0]), vec([-6.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 6.0)
        hit = self.confirm_hit(sphere, Ray(vec([2.0,-3.5,-7.0]), vec([-3.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 3 - 3 * np.sin(np.pi/3))

    def test_degenerate_sphere_rejected(self):
        with self.assertRaises(ValueError):
            Sphere(vec([0,0,0]), 0.0, None)
        with self.assertRaises(ValueError):
            Sphere(vec([0,0,0]), -1.0, None)


class TestPlaneIntersect(unittest.TestCase):

    def test_hit_from_above(self):
        plane = Plane(vec([0, 0, 0]), vec([0, 2, 0]), None)
        hit = plane.intersect(Ray(vec([1, 2, 1]), vec([0, -1, 0])))
        self.assertAlmostEqual(hit.t, 2.0)
        np.testing.assert_almost_equal(hit.point, [1, 0, 1])
        np.testing.assert_almost_equal(hit.normal, [0, 1, 0])
        self.assertTrue(hit.front_face)

    def test_hit_from_below_faces_ray(self):
        plane = Plane(vec([0, 0, 0]), vec([0, 1, 0]), None)
        hit = plane.intersect(Ray(vec([0, -3, 0]), vec([0, 1, 0])))
        self.assertAlmostEqual(hit.t, 3.0)
        np.testing.assert_almost_equal(hit.normal, [0, -1, 0])
        self.assertFalse(hit.front_face)

    def test_misses(self):
        plane = Plane(vec([0, 0, 0]), vec([0, 1, 0]), None)
        # parallel
        self.assertIs(plane.intersect(Ray(vec([0, 1, 0]), vec([1, 0, 0]))), no_hit)
        # pointing away
        self.assertIs(plane.intersect(Ray(vec([0, 1, 0]), vec([0, 1, 0]))), no_hit)

    def test_zero_normal_rejected(self):
        with self.assertRaises(ValueError):
            Plane(vec([0, 0, 0]), vec([0, 0, 0]), None)

    def test_unbounded(self):
        self.assertIsNone(Plane(vec([0, 0, 0]), vec([0, 1, 0]), None).get_bbox())


class TestCamera(unittest.TestCase):

    def test_default_camera(self):
        # A camera located at the origin facing the -z direction
        cam = Camera()
        # Center ray is straight down the axis
        ray = cam.generate_ray(flipy_vec([0.5, 0.5]))
        np.testing.assert_almost_equal(ray.origin, vec([0,0,0]))
        assert_direction_matches(ray.direction, vec([0,0,-1]))
        # FOV is 90 degrees, so corner rays are centered in octants
        ray = cam.generate_ray(flipy_vec([0, 0]))
        assert_direction_matches(ray.direction, vec([-1,-1,-1]))
        ray = cam.generate_ray(flipy_vec([1, 0]))
        assert_direction_matches(ray.direction, vec([ 1,-1,-1]))
        ray = cam.generate_ray(flipy_vec([0, 1]))
        assert_direction_matches(ray.direction, vec([-1, 1,-1]))

    def test_fov(self):
        # A camera with a different fov: rays should be scaled in x and y
        vfov = 60
        cam = Camera(vfov=vfov)
        s = np.tan(vfov/2 * np.pi/180)
        # Center ray is still straight down the axis
        ray = cam.generate_ray(flipy_vec([0.5, 0.5]))
        np.testing.assert_almost_equal(ray.origin, vec([0,0,0]))
        assert_direction_matches(ray.direction, vec([0,0,-1]))
        ray = cam.generate_ray(flipy_vec([0, 0]))
        assert_direction_matches(ray.direction, vec([-s,-s,-1]))

    def test_aspect(self):
        # A camera with a different aspect ratio: rays should be scaled in x
        aspect = 1.5
        cam = Camera(aspect=aspect)
        # Center ray is still straight down the axis
        ray = cam.generate_ray(flipy_vec([0.5, 0.5]))
        np.testing.assert_almost_equal(ray.origin, vec([0,0,0]))
        assert_direction_matches(ray.direction, vec([0,0,-1]))
        ray = cam.generate_ray(flipy_vec([1, 1]))
        assert_direction_matches(ray.direction, vec([1.5,1,-1]))

    def test_aspect_from_image(self):
        # without a fixed aspect the caller's aspect is used
        cam = Camera()
        ray = cam.generate_ray(flipy_vec([1, 1]), aspect=2.0)
        assert_direction_matches(ray.direction, vec([2,1,-1]))
        # a fixed aspect wins over the caller's
        cam = Camera(aspect=1.5)
        ray = cam.generate_ray(flipy_vec([1, 1]), aspect=2.0)
        assert_direction_matches(ray.direction, vec([1.5,1,-1]))

    def test_square_frame(self):
        # A camera with a frame where up is equal to v
        cam = Camera(eye=vec([1,2,2]), target=vec([1,4,2]), up=vec([0,0,1]))
        # Center ray is straight down the y axis
        ray = cam.generate_ray(flipy_vec([0.5, 0.5]))
        np.testing.assert_almost_equal(ray.origin, vec([1,2,2]))
        assert_direction_matches(ray.direction, vec([0,1,0]))
        # corners are like default camera but (x,y) is (x, z)
        ray = cam.generate_ray(flipy_vec([0, 0]))
        assert_direction_matches(ray.direction, vec([-1, 1,-1]))
        ray = cam.generate_ray(flipy_vec([1, 0]))
        assert_direction_matches(ray.direction, vec([ 1, 1,-1]))

    def test_arbitrary_frame(self):
        # A camera that lines up with nothing in particular
        eye = vec([3,4,5])
        target = vec([6,7,8])
        up = vec([1,2,3])
        vfov = 47
        cam = Camera(eye=eye, target=target, up=up, vfov=vfov)
        # Center ray points towards target
        ray = cam.generate_ray(flipy_vec([0.5, 0.5]))
        np.testing.assert_almost_equal(ray.origin, eye)
        assert_direction_matches(ray.direction, target - eye)

    def test_degenerate_frames_rejected(self):
        with self.assertRaises(ValueError):
            Camera(eye=vec([1,1,1]), target=vec([1,1,1]))
        with self.assertRaises(ValueError):
            Camera(eye=vec([0,0,0]), target=vec([0,5,0]), up=vec([0,1,0]))
        with self.assertRaises(ValueError):
            Camera(vfov=180)


class TestTriangleIntersect(unittest.TestCase):

    def test_simple(self):
        # A triangle on the xy plane and perpendicular rays
        tri = Triangle(np.array([[0,0,0], [1,0,0], [0,1,0]]), None)
        hit = tri.intersect(Ray(vec([0.3, 0.3, 1]), vec([0, 0, -1])))
        self.assertAlmostEqual(hit.t, 1.)
        np.testing.assert_allclose(hit.point, [0.3, 0.3, 0])
        np.testing.assert_allclose(hit.normal, [0, 0, 1])
        hit = tri.intersect(Ray(vec([-0.3, 0.3, 1]), vec([0, 0, -1])))
        self.assertEqual(hit.t, np.inf)

    def test_back_side_faces_ray(self):
        tri = Triangle(np.array([[0,0,0], [1,0,0], [0,1,0]]), None)
        hit = tri.intersect(Ray(vec([0.3, 0.3, -1]), vec([0, 0, 1])))
        self.assertAlmostEqual(hit.t, 1.)
        np.testing.assert_allclose(hit.normal, [0, 0, -1])
        self.assertFalse(hit.front_face)

    def test_transformed(self):
        # The same triangle under a linear xf of positive determinant
        M = np.array([[3,1,4],[1,5,9],[2,6,5]])
        M = np.sign(np.linalg.det(M)) * M  # ensure no reflection
        u = np.array([2,7,1])
        tri = Triangle(np.array([u + M @ [0,0,0], u + M @ [1,0,0], u + M @ [0,1,0]]), None)
        hit = tri.intersect(Ray(u + M @ [0.3, 0.3, 1], M @ [0, 0, -1]))
        self.assertAlmostEqual(hit.t, np.linalg.norm(M @ [0, 0, -1]))
        np.testing.assert_allclose(hit.point, u + M @ [0.3, 0.3, 0])
        assert_direction_matches(hit.normal, np.linalg.inv(M.transpose()) @ [0, 0, 1])
        hit = tri.intersect(Ray(u + M @ [-0.3, 0.3, 1], M @ [0, 0, -1]))
        self.assertEqual(hit.t, np.inf)

    def test_degenerate_triangle_rejected(self):
        with self.assertRaises(ValueError):
            Triangle(np.array([[0,0,0], [1,1,1], [2,2,2]]), None)


class TestAABB(unittest.TestCase):

    def test_slab_test(self):
        box = AABB(vec([-1,-1,-1]), vec([1,1,1]))
        self.assertTrue(box.intersect(Ray(vec([0,0,5]), vec([0,0,-1]))))
        self.assertTrue(box.intersect(Ray(vec([0,0,0]), vec([1,2,3]))))
        self.assertFalse(box.intersect(Ray(vec([0,3,5]), vec([0,0,-1]))))
        self.assertFalse(box.intersect(Ray(vec([0,0,5]), vec([0,0,1]))))

    def test_grow(self):
        box = AABB()
        box.grow(vec([1,2,3]))
        box.grow(vec([-1,0,5]))
        np.testing.assert_array_equal(box.min, [-1,0,3])
        np.testing.assert_array_equal(box.max, [1,2,5])
        np.testing.assert_array_equal(box.get_center(), [0,1,4])



if __name__ == '__main__':
    unittest.main()
