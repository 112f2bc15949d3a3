import numpy as np
from utils import vec, normalize

"""
Rays and the pinhole camera that generates them.
"""

EPSILON = 1e-4 # for offsetting rays and rejecting self-hits


class Ray:

    def __init__(self, origin, direction, start=EPSILON, end=np.inf):
        """Create a ray with the given origin and direction.

        Parameters:
          origin : (3,) -- the start point of the ray, a 3D point
          direction : (3,) -- the direction of the ray, normalized here
          start : float -- the smallest t that counts as a hit
          end : float -- the largest t that counts as a hit
        """
        self.origin = np.array(origin, np.float64)
        self.direction = normalize(np.array(direction, np.float64))
        self.start = start
        self.end = end

    def at(self, t):
        """Return the point at parameter t along the ray."""
        return self.origin + t * self.direction


class Camera:

    def __init__(self, eye=vec([0,0,0]), target=vec([0,0,-1]), up=vec([0,1,0]),
                 vfov=90.0, aspect=None):
        """Create a camera with given viewing parameters.

        Parameters:
          eye : (3,) -- the camera's location, aka viewpoint (a 3D point)
          target : (3,) -- where the camera is looking: a 3D point that appears centered in the view
          up : (3,) -- the camera's orientation: a 3D vector that appears straight up in the view
          vfov : float -- the full vertical field of view in degrees
          aspect : float -- the aspect ratio of the camera's view (ratio of width to height),
                   or None to take it from the image being rendered
        """
        self.eye = vec(eye)
        self.target = vec(target)
        self.aspect = aspect
        self.vfov = vfov

        if not 0 < vfov < 180:
            raise ValueError(f"vertical field of view must be in (0, 180) degrees, got {vfov}")

        try:
            self.w = normalize(self.eye - self.target)
            self.u = normalize(np.cross(vec(up), self.w))
        except ValueError:
            raise ValueError("degenerate camera frame: eye equals target or up is parallel to the view") from None
        self.v = np.cross(self.w, self.u)

        self.img_h_half = np.tan(np.radians(self.vfov) / 2.0)

    def generate_ray(self, img_point, aspect=None):
        """Compute the ray corresponding to a point in the image.

        Parameters:
          img_point : (2,) -- a 2D point in [0,1] x [0,1], where (0,0) is the upper left
                      corner of the image and (1,1) is the lower right.
          aspect : float -- aspect ratio to use when the camera does not fix one
        Return:
          Ray -- The ray corresponding to that image location
        """
        if self.aspect is not None:
            aspect = self.aspect
        elif aspect is None:
            aspect = 1.0
        img_w_half = aspect * self.img_h_half

        alpha = img_w_half * (img_point[0] * 2.0 - 1.0)
        beta = self.img_h_half * (1.0 - img_point[1] * 2.0)

        direction = (alpha * self.u) + (beta * self.v) - self.w

        return Ray(self.eye, direction)
