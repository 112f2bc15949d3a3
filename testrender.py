import io
import os
import tempfile
import unittest
import numpy as np
from utils import vec, to_srgb8, to_linear8, read_obj_triangles
from scene import Scene
from tracer import render_image
from ImLite import Image
from ExampleSceneDef import ThreeSpheresExample, TopDownSphereExample, TwoSpheresExample, ASSET_DIR
import cli

SCENE_TEXT = """
cam  0 0 4   0 0 0   0 1 0   40
bg   0.1 0.1 0.1
mtl  red  0.8 0.1 0.1  0.2 30 0
sph  0 0 0  1  red
lgt  4 4 4  50 50 50
"""


class TestRenderImage(unittest.TestCase):

    def test_empty_black_scene(self):
        scene = Scene([], [], bg_color=vec([0, 0, 0]))
        pix = render_image(scene, 2, 2)
        self.assertEqual(pix.shape, (2, 2, 3))
        self.assertEqual(pix.dtype, np.float32)
        np.testing.assert_array_equal(pix, np.zeros((2, 2, 3)))

    def test_image_shape(self):
        pix = render_image(Scene([]), 5, 3)
        self.assertEqual(pix.shape, (3, 5, 3))

    def test_bad_size(self):
        with self.assertRaises(ValueError):
            render_image(Scene([]), 0, 4)

    def test_values_in_range(self):
        pix = render_image(ThreeSpheresExample().scene, 16, 9)
        self.assertTrue(np.all(pix >= 0))
        self.assertTrue(np.all(pix <= 1))

    def test_deterministic(self):
        scene = ThreeSpheresExample().scene
        a = render_image(scene, 16, 9)
        b = render_image(scene, 16, 9)
        self.assertEqual(a.tobytes(), b.tobytes())

    def test_parallel_matches_serial(self):
        scene = ThreeSpheresExample().scene
        serial = render_image(scene, 16, 9)
        parallel = render_image(scene, 16, 9, workers=2)
        self.assertEqual(serial.tobytes(), parallel.tobytes())

    def test_sphere_from_above(self):
        pix = render_image(TopDownSphereExample().scene, 9, 9)
        row = pix[4]
        # the center pixel sees the point straight under the light
        np.testing.assert_allclose(row[4], [1, 1, 1], rtol=1e-6)
        # shading falls off toward the silhouette, then background
        self.assertGreater(row[4, 0], row[5, 0])
        self.assertGreater(row[5, 0], row[6, 0])
        self.assertGreater(row[6, 0], 0)
        np.testing.assert_array_equal(row[8], [0, 0, 0])
        # symmetric about the center
        np.testing.assert_allclose(row[3], row[5], rtol=1e-6)


class TestExampleScenes(unittest.TestCase):

    def test_render_example(self):
        im = TwoSpheresExample().render(output_shape=[6, 8])
        self.assertEqual(im.width, 8)
        self.assertEqual(im.height, 6)
        self.assertEqual(im.dtype, np.uint8)

    def test_render_gamma(self):
        example = TwoSpheresExample()
        pix = render_image(example.scene, 8, 6)
        np.testing.assert_array_equal(example.render(output_shape=[6, 8]).pixels, to_srgb8(pix))
        np.testing.assert_array_equal(example.render(output_shape=[6, 8], gamma_correct=False).pixels, pix)

    def test_cube_mesh(self):
        with open(os.path.join(ASSET_DIR, "cube.obj")) as f:
            tris = read_obj_triangles(f)
        self.assertEqual(tris.shape, (12, 3, 3))
        np.testing.assert_array_equal(np.abs(tris), np.ones((12, 3, 3)))

    def test_empty_mesh(self):
        tris = read_obj_triangles(io.StringIO("# nothing here\nv 0 0 0\n"))
        self.assertEqual(tris.shape, (0, 3, 3))


class TestImageOutput(unittest.TestCase):

    def test_quantize(self):
        np.testing.assert_array_equal(to_srgb8(vec([0, 1, 2, -1])), [0, 255, 255, 0])
        np.testing.assert_array_equal(to_linear8(vec([0, 0.5, 1])), [0, 128, 255])

    def test_write_and_read(self):
        rng = np.random.default_rng(0)
        pixels = rng.integers(0, 256, size=(5, 7, 3), dtype=np.uint8)
        with tempfile.TemporaryDirectory() as tmp:
            for name in ['out.png', 'out.bmp']:
                path = os.path.join(tmp, name)
                Image(pixels=pixels).writeToFile(path)
                im = Image(path)
                self.assertEqual(im.width, 7)
                self.assertEqual(im.height, 5)
                np.testing.assert_array_equal(im.pixels, pixels)

    def test_float_pixels(self):
        im = Image(pixels=np.full((2, 2, 3), 0.5, np.float32))
        np.testing.assert_array_equal(im.ipixels, np.full((2, 2, 3), 128))

    def test_write_failure(self):
        im = Image(pixels=np.zeros((2, 2, 3), np.uint8))
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(OSError):
                im.writeToFile(os.path.join(tmp, 'missing', 'out.png'))
        with self.assertRaises(ValueError):
            im.writeToFile()

    def test_known_formats(self):
        self.assertTrue(Image.CanWrite('out.png'))
        self.assertTrue(Image.CanWrite('OUT.BMP'))
        self.assertFalse(Image.CanWrite('out.xyz'))
        self.assertFalse(Image.CanWrite('out'))
        im = Image(pixels=np.zeros((2, 2, 3), np.uint8))
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ValueError):
                im.writeToFile(os.path.join(tmp, 'out.xyz'))


class TestCommandLine(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.scene_path = os.path.join(self.tmp.name, 'scene.txt')
        with open(self.scene_path, 'w') as f:
            f.write(SCENE_TEXT)

    def tearDown(self):
        self.tmp.cleanup()

    def test_main_writes_image(self):
        out = os.path.join(self.tmp.name, 'out.png')
        code = cli.main([self.scene_path, '--width', '4', '--height', '3', '-q', '-o', out])
        self.assertEqual(code, 0)
        im = Image(out)
        self.assertEqual(im.width, 4)
        self.assertEqual(im.height, 3)

    def test_main_options(self):
        out = os.path.join(self.tmp.name, 'out.bmp')
        code = cli.main([self.scene_path, '--width', '4', '--height', '4', '-q', '-o', out,
                         '--bvh', '--no-gamma', '-d', '0'])
        self.assertEqual(code, 0)
        # background corner, written without gamma
        np.testing.assert_array_equal(Image(out).pixels[0, 0], [26, 26, 26])

    def test_write_failure_exits(self):
        out = os.path.join(self.tmp.name, 'missing', 'out.png')
        with self.assertRaises(SystemExit) as cm:
            cli.main([self.scene_path, '--width', '2', '--height', '2', '-q', '-o', out])
        self.assertEqual(cm.exception.code, 1)

    def test_bad_scene_exits(self):
        bad_path = os.path.join(self.tmp.name, 'bad.txt')
        with open(bad_path, 'w') as f:
            f.write("sph 0 0 0 1 undefined\n")
        out = os.path.join(self.tmp.name, 'out.png')
        for argv in [[bad_path], [os.path.join(self.tmp.name, 'nope.txt')],
                     [self.scene_path, '--width', '0']]:
            with self.assertRaises(SystemExit) as cm:
                cli.main(argv + ['-q', '-o', out])
            self.assertEqual(cm.exception.code, 2)
        self.assertFalse(os.path.exists(out))

    def test_unknown_output_format(self):
        for name in ['out.xyz', 'out']:
            out = os.path.join(self.tmp.name, name)
            with self.assertRaises(SystemExit) as cm:
                cli.main([self.scene_path, '--width', '2', '--height', '2', '-q', '-o', out])
            self.assertEqual(cm.exception.code, 2)
            self.assertFalse(os.path.exists(out))

    def test_render_scene_script(self):
        out = os.path.join(self.tmp.name, 'script.png')
        scene = Scene([], [], bg_color=vec([1, 0, 0]))
        im = cli.render(scene, ['--width', '3', '--height', '2', '-q', '-o', out])
        np.testing.assert_array_equal(im.pixels, np.tile([255, 0, 0], (2, 3, 1)))
        self.assertTrue(os.path.exists(out))


if __name__ == '__main__':
    unittest.main()
