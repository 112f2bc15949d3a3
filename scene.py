import numpy as np
from utils import vec, normalize
from geometry import no_hit
from bvh import build_bvh
from ray import Camera, EPSILON

"""
Scene description: lights, the camera, and the surfaces a ray can hit.
"""


class PointLight:

    def __init__(self, position, intensity, attenuation=(0., 0., 1.)):
        """Create a point light at given position and with given intensity

        Parameters:
          position : (3,) -- 3D point giving the light source location in scene
          intensity : (3,) or float -- RGB or scalar intensity of the source
          attenuation : (3,) -- constant, linear and quadratic falloff coefficients;
                        the default is inverse-square falloff
        """
        self.position = vec(position)
        self.intensity = intensity if np.isscalar(intensity) else vec(intensity)
        self.attenuation = tuple(float(c) for c in attenuation)
        if any(c < 0 for c in self.attenuation) or sum(self.attenuation) == 0:
            raise ValueError(f"invalid attenuation coefficients {attenuation}")

    def falloff(self, dist):
        c, l, q = self.attenuation
        return 1.0 / (c + l * dist + q * dist * dist)

    def samples(self, point):
        """Return [(direction to light, distance, radiance)] as seen from point."""
        to_light = self.position - point
        dist = np.linalg.norm(to_light)
        if dist < EPSILON:
            return []
        return [(to_light / dist, dist, self.intensity * self.falloff(dist))]


class DirectionalLight:

    def __init__(self, direction, intensity):
        """Create a light infinitely far away, shining along direction

        Parameters:
          direction : (3,) -- the direction the light travels
          intensity : (3,) or float -- RGB or scalar intensity of the source
        """
        self.direction = normalize(vec(direction))
        self.intensity = intensity if np.isscalar(intensity) else vec(intensity)

    def samples(self, point):
        return [(-self.direction, np.inf, self.intensity)]


class AreaLight(PointLight):

    def __init__(self, corner, edge_u, edge_v, intensity, samples=4, attenuation=(0., 0., 1.)):
        """Create a parallelogram-shaped light source.

        The light covers corner + s*edge_u + t*edge_v for s, t in [0,1], and is
        sampled at the centers of a fixed samples x samples grid, so renders stay
        deterministic.
        """
        if samples < 1:
            raise ValueError(f"area light needs at least one sample per side, got {samples}")
        self.corner = vec(corner)
        self.edge_u = vec(edge_u)
        self.edge_v = vec(edge_v)
        self.n_samples = int(samples)
        super().__init__(self.corner + 0.5 * (self.edge_u + self.edge_v), intensity, attenuation)

        offsets = (np.arange(self.n_samples) + 0.5) / self.n_samples
        self.points = [self.corner + s * self.edge_u + t * self.edge_v
                       for s in offsets for t in offsets]

    def samples(self, point):
        result = []
        share = 1.0 / len(self.points)
        for light_point in self.points:
            to_light = light_point - point
            dist = np.linalg.norm(to_light)
            if dist < EPSILON:
                continue
            result.append((to_light / dist, dist, self.intensity * self.falloff(dist) * share))
        return result


class Scene:

    def __init__(self, surfs, lights=(), camera=None, bg_color=vec([0.2,0.3,0.5]), ambient=0.1,
                 use_bvh=False):
        """Create a scene containing the given objects.

        Parameters:
          surfs : [Sphere, Plane, Triangle] -- list of the surfaces in the scene
          lights : [PointLight, DirectionalLight, AreaLight] -- the lights
          camera : Camera -- the viewpoint, a default Camera if None
          bg_color : (3,) -- RGB color that is seen where no objects appear
          ambient : (3,) or float -- ambient light intensity, scaled by each material's k_a
          use_bvh : bool -- intersect bounded surfaces through a BVH instead of a linear scan

        The scene is read-only once built; rendering never modifies it.
        """
        self.surfs = tuple(surfs)
        self.lights = tuple(lights)
        self.camera = camera if camera is not None else Camera()
        self.bg_color = np.clip(vec(bg_color), 0, 1)
        self.ambient = ambient

        self.bvh_root = None
        self.unbounded = self.surfs
        if use_bvh:
            bounded = [s for s in self.surfs if s.get_bbox() is not None]
            self.unbounded = tuple(s for s in self.surfs if s.get_bbox() is None)
            if bounded:
                self.bvh_root = build_bvh(bounded)

    def intersect(self, ray):
        """Computes the first (smallest t) intersection between a ray and the scene.

        Parameters:
          ray : Ray -- the ray to intersect with the scene
        Return:
          Hit -- the hit data, no_hit if nothing lies within (ray.start, ray.end)
        """
        closest_hit = no_hit
        if self.bvh_root is not None:
            closest_hit = self.bvh_root.intersect(ray)

        for surf in self.unbounded:
            hit = surf.intersect(ray)
            if hit.t < closest_hit.t:
                closest_hit = hit

        return closest_hit

    def cast_camera_ray(self, x, y, width, height):
        """Return the camera ray through the center of pixel (x, y).

        Pixel (0, 0) is the upper left corner of a width x height image.
        """
        img_point = np.array([(x + 0.5) / width, (y + 0.5) / height])
        return self.camera.generate_ray(img_point, aspect=width / height)
