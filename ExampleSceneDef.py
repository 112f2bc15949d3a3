import os
from ImLite import Image
from utils import vec, to_srgb8, read_obj_triangles
from materials import Material
from geometry import Sphere, Plane, Triangle
from ray import Camera
from scene import Scene, PointLight, DirectionalLight
from tracer import render_image, MAX_DEPTH

ASSET_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'assets')


class ExampleSceneDef(object):
    def __init__(self, scene):
        self.scene = scene

    def render(self, output_path=None, output_shape=None, gamma_correct=True,
               max_depth=MAX_DEPTH, workers=1):
        if(output_shape is None):
            output_shape=[128,128]
        pix = render_image(self.scene, output_shape[1], output_shape[0], max_depth=max_depth, workers=workers)
        if(gamma_correct):
            im = Image(pixels=to_srgb8(pix))
        else:
            im = Image(pixels=pix)
        if(output_path is None):
            return im
        im.writeToFile(output_path)
        return im


def TwoSpheresExample():
    tan = Material(vec([0.7, 0.7, 0.4]), 0.6)
    gray = Material(vec([0.2, 0.2, 0.2]))

    lights = [
        PointLight(vec([12, 10, 5]), vec([300, 300, 300])),
    ]
    camera = Camera(vec([3, 1.7, 5]), target=vec([0, 0, 0]), vfov=25, aspect=16 / 9)

    scene = Scene([
        Sphere(vec([0, 0, 0]), 0.5, tan),
        Sphere(vec([0, -40, 0]), 39.5, gray),
    ], lights, camera=camera)
    return ExampleSceneDef(scene=scene)


def ThreeSpheresExample():
    tan = Material(vec([0.4, 0.4, 0.2]), k_s=0.3, p=90, k_m=0.3)
    blue = Material(vec([0.2, 0.2, 0.5]), k_m=0.5)
    gray = Material(vec([0.2, 0.2, 0.2]), k_m=0.4)

    lights = [
        PointLight(vec([12, 10, 5]), vec([300, 300, 300])),
    ]
    camera = Camera(vec([3, 1.2, 5]), target=vec([0, -0.4, 0]), vfov=24, aspect=16 / 9)

    scene = Scene([
        Sphere(vec([-0.7, 0, 0]), 0.5, tan),
        Sphere(vec([0.7, 0, 0]), 0.5, blue),
        Sphere(vec([0, -40, 0]), 39.5, gray),
    ], lights, camera=camera)
    return ExampleSceneDef(scene=scene)


def GlassSphereExample():
    glass = Material(vec([0.05, 0.05, 0.05]), k_s=0.8, p=200, k_m=0.1, k_t=0.85, ior=1.5)
    red = Material(vec([0.7, 0.15, 0.1]))
    floor = Material(vec([0.5, 0.5, 0.5]), k_m=0.2)

    lights = [
        PointLight(vec([4, 8, 6]), vec([150, 150, 150])),
        DirectionalLight(vec([-1, -1, -0.5]), vec([0.3, 0.3, 0.3])),
    ]
    camera = Camera(vec([0, 1, 5]), target=vec([0, 0, 0]), vfov=35)

    scene = Scene([
        Sphere(vec([0, 0, 0]), 0.6, glass),
        Sphere(vec([0.4, 0, -2]), 0.5, red),
        Plane(vec([0, -0.6, 0]), vec([0, 1, 0]), floor),
    ], lights, camera=camera)
    return ExampleSceneDef(scene=scene)


def MirrorChamberExample():
    """Two facing mirrors with a ball between them: every primary ray bounces until the depth limit."""
    mirror = Material(vec([0.1, 0.1, 0.1]), k_m=0.9)
    ball = Material(vec([0.8, 0.3, 0.2]), k_s=0.5, p=50)

    lights = [
        PointLight(vec([0, 3, 2]), vec([40, 40, 40])),
    ]
    camera = Camera(vec([0, 0.5, 0]), target=vec([-1, 0.3, -0.2]), vfov=60)

    scene = Scene([
        Plane(vec([-2, 0, 0]), vec([1, 0, 0]), mirror),
        Plane(vec([2, 0, 0]), vec([-1, 0, 0]), mirror),
        Sphere(vec([0, 0, -1]), 0.4, ball),
    ], lights, camera=camera, bg_color=vec([0.05, 0.05, 0.1]))
    return ExampleSceneDef(scene=scene)


def TopDownSphereExample():
    """A unit sphere at the origin lit from straight above, seen from straight above."""
    white = Material(vec([1.0, 1.0, 1.0]))
    camera = Camera(vec([0, 3, 0]), target=vec([0, 0, 0]), up=vec([0, 0, -1]), vfov=60)
    scene = Scene([
        Sphere(vec([0, 0, 0]), 1.0, white),
    ], [DirectionalLight(vec([0, -1, 0]), 1.0)], camera=camera, bg_color=vec([0, 0, 0]), ambient=0.0)
    return ExampleSceneDef(scene=scene)


def CubeExample(use_bvh=True):
    tan = Material(vec([0.7, 0.7, 0.4]), 0.6)
    gray = Material(vec([0.2, 0.2, 0.2]))

    # Read the triangle mesh for a 2x2x2 cube, and scale it down to 1x1x1 to fit the scene.
    with open(os.path.join(ASSET_DIR, "cube.obj")) as f:
        vs_list = 0.5 * read_obj_triangles(f)

    lights = [
        PointLight(vec([12, 10, 5]), vec([300, 300, 300])),
    ]
    camera = Camera(vec([3, 1.7, 5]), target=vec([0, 0, 0]), vfov=25, aspect=16 / 9)

    scene = Scene([
                      # Make a big sphere for the floor
                      Sphere(vec([0, -40, 0]), 39.5, gray),
                  ] + [
                      # Make triangle objects from the vertex coordinates
                      Triangle(vs, tan) for vs in vs_list
                  ], lights, camera=camera, use_bvh=use_bvh)
    return ExampleSceneDef(scene=scene)
