import os
import numpy as np
from utils import vec, read_obj_triangles
from materials import Material
from geometry import Sphere, Plane, Triangle
from ray import Camera
from scene import Scene, PointLight, DirectionalLight, AreaLight

"""
Loader for plain-text scene files.

One entry per line, whitespace separated, '#' starts a comment:

  cam  ex ey ez  tx ty tz  ux uy uz  vfov
  bg   r g b
  amb  r g b
  mtl  name  dr dg db  ks p  km  [kt ior]
  sph  cx cy cz  radius  mtl
  pln  px py pz  nx ny nz  mtl
  tri  x0 y0 z0  x1 y1 z1  x2 y2 z2  mtl
  obj  path  scale  tx ty tz  mtl
  lgt  px py pz  r g b  [c l q]
  dir  dx dy dz  r g b
  area cx cy cz  ux uy uz  vx vy vz  r g b  samples
"""


class SceneFileError(ValueError):
    """A scene file could not be turned into a Scene."""

    def __init__(self, path, line_no, message):
        super().__init__(f"{path}:{line_no}: {message}")
        self.path = path
        self.line_no = line_no


# keyword -> allowed numbers of fields after the keyword
_ARITY = {
    'cam': (10,),
    'bg': (3,),
    'amb': (3,),
    'mtl': (7, 9),
    'sph': (5,),
    'pln': (7,),
    'tri': (10,),
    'obj': (6,),
    'lgt': (6, 9),
    'dir': (6,),
    'area': (13,),
}


def _floats(fields):
    return [float(f) for f in fields]


def load_scene(path, use_bvh=False):
    """Read the scene file at path.

    Parameters:
      path : str -- the scene file
      use_bvh : bool -- passed through to Scene
    Return:
      Scene -- the scene described by the file
    Raises SceneFileError for malformed input and OSError if a file cannot be read.
    """
    materials = {}
    surfs = []
    lights = []
    camera = None
    bg_color = vec([0, 0, 0])
    ambient = vec([0, 0, 0])
    base_dir = os.path.dirname(os.path.abspath(path))

    with open(path, 'r') as f:
        for line_no, line in enumerate(f, start=1):
            line = line.split('#', 1)[0].strip()
            if not line:
                continue
            parts = line.split()
            kind, fields = parts[0], parts[1:]
            if kind not in _ARITY:
                raise SceneFileError(path, line_no, f"unknown entry '{kind}'")
            if len(fields) not in _ARITY[kind]:
                expected = " or ".join(str(n) for n in _ARITY[kind])
                raise SceneFileError(path, line_no, f"'{kind}' takes {expected} fields, got {len(fields)}")

            def material(name):
                if name not in materials:
                    raise SceneFileError(path, line_no, f"undefined material '{name}'")
                return materials[name]

            try:
                if kind == 'cam':
                    p = _floats(fields)
                    camera = Camera(vec(p[0:3]), target=vec(p[3:6]), up=vec(p[6:9]), vfov=p[9])
                elif kind == 'bg':
                    bg_color = vec(_floats(fields))
                elif kind == 'amb':
                    ambient = vec(_floats(fields))
                elif kind == 'mtl':
                    p = _floats(fields[1:])
                    if len(p) == 8:
                        materials[fields[0]] = Material(vec(p[0:3]), k_s=p[3], p=p[4], k_m=p[5],
                                                        k_t=p[6], ior=p[7])
                    else:
                        materials[fields[0]] = Material(vec(p[0:3]), k_s=p[3], p=p[4], k_m=p[5])
                elif kind == 'sph':
                    p = _floats(fields[:4])
                    surfs.append(Sphere(vec(p[0:3]), p[3], material(fields[4])))
                elif kind == 'pln':
                    p = _floats(fields[:6])
                    surfs.append(Plane(vec(p[0:3]), vec(p[3:6]), material(fields[6])))
                elif kind == 'tri':
                    p = _floats(fields[:9])
                    surfs.append(Triangle(np.array(p).reshape(3, 3), material(fields[9])))
                elif kind == 'obj':
                    mat = material(fields[5])
                    p = _floats(fields[1:5])
                    obj_path = os.path.join(base_dir, fields[0])
                    with open(obj_path, 'r') as obj_file:
                        vs_list = p[0] * read_obj_triangles(obj_file) + vec(p[1:4])
                    surfs.extend(Triangle(vs, mat) for vs in vs_list)
                elif kind == 'lgt':
                    p = _floats(fields)
                    if len(p) == 9:
                        lights.append(PointLight(vec(p[0:3]), vec(p[3:6]), attenuation=p[6:9]))
                    else:
                        lights.append(PointLight(vec(p[0:3]), vec(p[3:6])))
                elif kind == 'dir':
                    p = _floats(fields)
                    lights.append(DirectionalLight(vec(p[0:3]), vec(p[3:6])))
                elif kind == 'area':
                    p = _floats(fields[:12])
                    lights.append(AreaLight(vec(p[0:3]), vec(p[3:6]), vec(p[6:9]), vec(p[9:12]),
                                            samples=int(fields[12])))
            except SceneFileError:
                raise
            except ValueError as e:
                raise SceneFileError(path, line_no, str(e)) from e

    return Scene(surfs, lights, camera=camera, bg_color=bg_color, ambient=ambient, use_bvh=use_bvh)
