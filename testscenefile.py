import io
import os
import tempfile
import unittest
import numpy as np
from geometry import Sphere, Plane, Triangle
from scene import PointLight, DirectionalLight, AreaLight
from utils import read_obj_triangles
from scene_file import load_scene, SceneFileError

SCENE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'scenes')


class TestExampleSceneFiles(unittest.TestCase):

    def test_three_spheres(self):
        scene = load_scene(os.path.join(SCENE_DIR, 'three_spheres.txt'))
        self.assertEqual([type(s) for s in scene.surfs], [Sphere, Sphere, Sphere, Plane])
        self.assertEqual([type(l) for l in scene.lights], [PointLight, AreaLight])
        np.testing.assert_array_equal(scene.camera.eye, [3, 1.2, 5])
        self.assertEqual(scene.camera.vfov, 24)
        np.testing.assert_array_equal(scene.bg_color, [0.2, 0.3, 0.5])
        np.testing.assert_array_equal(scene.ambient, [0.1, 0.1, 0.1])

        glass = scene.surfs[2].material
        self.assertTrue(glass.is_refractive)
        self.assertEqual(glass.ior, 1.5)
        self.assertFalse(scene.surfs[0].material.is_refractive)
        self.assertEqual(scene.lights[1].n_samples, 3)

    def test_mesh_scene(self):
        scene = load_scene(os.path.join(SCENE_DIR, 'cube.txt'), use_bvh=True)
        triangles = [s for s in scene.surfs if isinstance(s, Triangle)]
        self.assertEqual(len(triangles), 12)
        self.assertEqual(len(scene.surfs), 13)
        self.assertIsNotNone(scene.bvh_root)
        # scaled down to a unit cube
        np.testing.assert_array_equal(np.abs(triangles[0].vs), np.full((3, 3), 0.5))


class TestSceneFileParsing(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp.cleanup()

    def write(self, text, name='scene.txt'):
        path = os.path.join(self.tmp.name, name)
        with open(path, 'w') as f:
            f.write(text)
        return path

    def assert_error_at(self, text, line_no):
        path = self.write(text)
        with self.assertRaises(SceneFileError) as cm:
            load_scene(path)
        self.assertEqual(cm.exception.line_no, line_no)
        self.assertEqual(cm.exception.path, path)
        self.assertIn(f":{line_no}:", str(cm.exception))

    def test_defaults(self):
        scene = load_scene(self.write("# nothing but a comment\n\n"))
        self.assertEqual(scene.surfs, ())
        self.assertEqual(scene.lights, ())
        np.testing.assert_array_equal(scene.bg_color, [0, 0, 0])
        np.testing.assert_array_equal(scene.camera.eye, [0, 0, 0])

    def test_entries(self):
        scene = load_scene(self.write(
            "mtl m 1 1 1 0 20 0   # white\n"
            "tri 0 0 0  1 0 0  0 1 0  m\n"
            "dir 0 -1 0  1 1 1\n"
            "lgt 0 5 0  2 2 2\n"))
        [tri] = scene.surfs
        np.testing.assert_array_equal(tri.vs, [[0, 0, 0], [1, 0, 0], [0, 1, 0]])
        self.assertIsInstance(scene.lights[0], DirectionalLight)
        np.testing.assert_array_equal(scene.lights[1].intensity, [2, 2, 2])

    def test_shared_material(self):
        scene = load_scene(self.write(
            "mtl m 1 1 1 0 20 0\n"
            "sph 0 0 0 1 m\n"
            "sph 3 0 0 1 m\n"))
        self.assertIs(scene.surfs[0].material, scene.surfs[1].material)

    def test_mesh_relative_to_scene_file(self):
        self.write("v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 2 3\n", name='tri.obj')
        scene = load_scene(self.write("mtl m 1 1 1 0 20 0\nobj tri.obj 2 0 0 1 m\n"))
        [tri] = scene.surfs
        np.testing.assert_array_equal(tri.vs, [[0, 0, 1], [2, 0, 1], [0, 2, 1]])

    def test_missing_mesh(self):
        path = self.write("mtl m 1 1 1 0 20 0\nobj nope.obj 1 0 0 0 m\n")
        with self.assertRaises(OSError):
            load_scene(path)

    def test_unknown_entry(self):
        self.assert_error_at("bg 0 0 0\nbox 0 0 0 1 1 1\n", 2)

    def test_wrong_field_count(self):
        self.assert_error_at("sph 0 0 0 1\n", 1)
        self.assert_error_at("mtl m 1 1 1 0 20 0 0.5\n", 1)

    def test_undefined_material(self):
        self.assert_error_at("mtl m 1 1 1 0 20 0\n\nsph 0 0 0 1 other\n", 3)

    def test_bad_numbers(self):
        self.assert_error_at("bg 0 zero 0\n", 1)

    def test_degenerate_geometry(self):
        self.assert_error_at("mtl m 1 1 1 0 20 0\nsph 0 0 0 0 m\n", 2)
        self.assert_error_at("mtl m 1 1 1 0 20 0\ntri 0 0 0  1 1 1  2 2 2  m\n", 2)
        self.assert_error_at("cam 0 0 0  0 0 0  0 1 0  60\n", 1)

    def test_invalid_material(self):
        self.assert_error_at("mtl m 1 1 1 0 20 1.5\n", 1)

    def test_light_attenuation(self):
        scene = load_scene(self.write("lgt 0 5 0  2 2 2\nlgt 0 5 0  2 2 2  1 0 0\n"))
        default, constant = scene.lights
        self.assertEqual(default.attenuation, (0., 0., 1.))
        self.assertEqual(constant.attenuation, (1., 0., 0.))
        [(_, _, radiance)] = constant.samples(np.zeros(3))
        np.testing.assert_array_equal(radiance, [2, 2, 2])
        self.assert_error_at("lgt 0 5 0  2 2 2  0 0 0\n", 1)
        self.assert_error_at("lgt 0 5 0  2 2 2  1 0\n", 1)

    def test_bad_mesh_index(self):
        self.write("v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 2 7\n", name='bad.obj')
        self.assert_error_at("mtl m 1 1 1 0 20 0\nobj bad.obj 1 0 0 0 m\n", 2)


class TestObjIndices(unittest.TestCase):

    def test_relative_indices(self):
        tris = read_obj_triangles(io.StringIO("v 0 0 0\nv 1 0 0\nv 0 1 0\nv 5 5 5\nf -4 -3 -2\n"))
        np.testing.assert_array_equal(tris, [[[0, 0, 0], [1, 0, 0], [0, 1, 0]]])

    def test_relative_to_current_line(self):
        # negative indices count back from the vertices read so far
        tris = read_obj_triangles(io.StringIO(
            "v 0 0 0\nv 1 0 0\nv 0 1 0\nf -3 -2 -1\n"
            "v 0 0 2\nv 1 0 2\nv 0 1 2\nf -3 -2 -1\n"))
        np.testing.assert_array_equal(tris[:, :, 2], [[0, 0, 0], [2, 2, 2]])

    def test_mixed_with_normals(self):
        tris = read_obj_triangles(io.StringIO(
            "v 0 0 0\nv 1 0 0\nv 0 1 0\nvn 0 0 1\nf 1//-1 -2//1 3//-1\n"))
        np.testing.assert_array_equal(tris, [[[0, 0, 0], [1, 0, 0], [0, 1, 0]]])

    def test_out_of_range(self):
        for face in ["f 1 2 4", "f 0 1 2", "f -4 -3 -2", "f 1//2 2//1 3//1"]:
            with self.assertRaises(ValueError):
                read_obj_triangles(io.StringIO("v 0 0 0\nv 1 0 0\nv 0 1 0\nvn 0 0 1\n" + face + "\n"))


if __name__ == '__main__':
    unittest.main()
