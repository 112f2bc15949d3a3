import numpy as np
from utils import vec, normalize

class Hit:
    def __init__(self, t, point=None, normal=None, material=None, front_face=True):
        """Create a Hit with the given data.

        Parameters:
          t : float -- the t value of the intersection along the ray
          point : (3,) -- the 3D point where the intersection happens
          normal : (3,) -- the 3D unit normal to the surface at the hit point, facing the ray
          material : (Material) -- the material of the surface
          front_face : bool -- True if the ray arrived from the outside of the surface
        """
        self.t = t
        self.point = point
        self.normal = normal
        self.material = material
        self.front_face = front_face

# Value to represent absence of an intersection
no_hit = Hit(np.inf)


def facing_hit(ray, t, outward_normal, material):
    """Build a Hit whose normal is flipped, if needed, to face the incoming ray."""
    front_face = np.dot(ray.direction, outward_normal) < 0
    normal = outward_normal if front_face else -outward_normal
    return Hit(t, ray.at(t), normal, material, front_face)


class Sphere:

    def __init__(self, center, radius, material):
        """Create a sphere with the given center and radius.

        Parameters:
          center : (3,) -- a 3D point specifying the sphere's center
          radius : float -- a Python float specifying the sphere's radius
          material : Material -- the material of the surface
        """
        if not radius > 0:
            raise ValueError(f"sphere radius must be positive, got {radius}")
        self.center = vec(center)
        self.radius = float(radius)
        self.material = material

    def get_bbox(self):
        """Return the AABB for this sphere."""
        r_vec = vec([self.radius, self.radius, self.radius])
        return AABB(self.center - r_vec, self.center + r_vec)

    def intersect(self, ray):
        """Computes the first (smallest t) intersection between a ray and this sphere.

        Parameters:
          ray : Ray -- the ray to intersect with the sphere
        Return:
          Hit -- the hit data
        """
        sphere_vec = ray.origin - self.center
        a = np.dot(ray.direction, ray.direction)
        b = 2 * np.dot(ray.direction, sphere_vec)
        c = np.dot(sphere_vec, sphere_vec) - self.radius * self.radius
        discriminant = b * b - 4 * a * c
        if discriminant < 0:
            return no_hit
        disc_sqrt = np.sqrt(discriminant)
        minus = (-b - disc_sqrt) / (2 * a)
        plus = (-b + disc_sqrt) / (2 * a)
        if ray.start < minus < ray.end:
            t = minus
        elif ray.start < plus < ray.end:
            # origin is inside the sphere
            t = plus
        else:
            return no_hit
        outward = (ray.at(t) - self.center) / self.radius
        return facing_hit(ray, t, outward, self.material)


class Plane:

    def __init__(self, point, normal, material):
        """Create an infinite plane through a point.

        Parameters:
          point : (3,) -- any 3D point on the plane
          normal : (3,) -- the plane's normal, normalized here
          material : Material -- the material of the surface
        """
        self.point = vec(point)
        self.normal = normalize(vec(normal))
        self.material = material

    def get_bbox(self):
        """Planes are unbounded, so they have no AABB."""
        return None

    def intersect(self, ray):
        """Computes the intersection between a ray and this plane, if it exists.

        Parameters:
          ray : Ray -- the ray to intersect with the plane
        Return:
          Hit -- the hit data
        """
        denom = np.dot(ray.direction, self.normal)
        if abs(denom) < 1e-8:
            return no_hit
        t = np.dot(self.point - ray.origin, self.normal) / denom
        if ray.start < t < ray.end:
            return facing_hit(ray, t, self.normal, self.material)
        return no_hit


class Triangle:

    def __init__(self, vs, material):
        """Create a triangle from the given vertices.

        Parameters:
          vs (3,3) -- an arry of 3 3D points that are the vertices (CCW order)
          material : Material -- the material of the surface
        """
        self.vs = np.array(vs, dtype=np.float64)
        self.material = material
        self.edge_1 = self.vs[1] - self.vs[0]
        self.edge_2 = self.vs[2] - self.vs[0]
        try:
            self.normal = normalize(np.cross(self.edge_1, self.edge_2))
        except ValueError:
            raise ValueError(f"degenerate triangle with zero area: {self.vs.tolist()}") from None

    def get_bbox(self):
        """Return the AABB for this triangle."""
        bbox = AABB()
        bbox.grow(self.vs[0])
        bbox.grow(self.vs[1])
        bbox.grow(self.vs[2])
        return bbox

    def intersect(self, ray):
        """Computes the intersection between a ray and this triangle, if it exists.

        Parameters:
          ray : Ray -- the ray to intersect with the triangle
        Return:
          Hit -- the hit data
        """
        v_a = self.vs[0]
        temp_vec = np.cross(ray.direction, self.edge_2)
        det = np.dot(self.edge_1, temp_vec)

        if -1e-8 < det and det < 1e-8:
            return no_hit

        inverse_det = 1.0 / det
        s = ray.origin - v_a
        u = np.dot(s, temp_vec) * inverse_det

        if u < 0 or u > 1:
            return no_hit

        temp_vec2 = np.cross(s, self.edge_1)
        v = np.dot(ray.direction, temp_vec2) * inverse_det

        if v < 0 or u + v > 1:
            return no_hit

        t = np.dot(self.edge_2, temp_vec2) * inverse_det

        if t > ray.start and t < ray.end:
            return facing_hit(ray, t, self.normal, self.material)

        return no_hit


class AABB:
    def __init__(self, min_point=None, max_point=None):
        """Create an Axis-Aligned Bounding Box, empty by default."""
        self.min = vec(min_point) if min_point is not None else vec([np.inf, np.inf, np.inf])
        self.max = vec(max_point) if max_point is not None else vec([-np.inf, -np.inf, -np.inf])

    def grow(self, point):
        """Grow the box to include a new point."""
        self.min = np.minimum(self.min, point)
        self.max = np.maximum(self.max, point)

    def grow_box(self, other_box):
        """Grow the box to include another AABB."""
        self.min = np.minimum(self.min, other_box.min)
        self.max = np.maximum(self.max, other_box.max)

    def get_center(self):
        """Get the center point of the AABB."""
        return (self.min + self.max) * 0.5

    def intersect(self, ray):
        """Check if the ray intersects the AABB using the 'Slab Test'."""
        tmin = ray.start
        tmax = ray.end

        for i in range(3):
            dir_i = ray.direction[i]
            orig_i = ray.origin[i]

            # If the ray is parallel to the slab, check origin against bounds
            if np.abs(dir_i) < 1e-12:
                if orig_i < self.min[i] or orig_i > self.max[i]:
                    return False
                else:
                    continue

            inv = 1.0 / dir_i
            t0 = (self.min[i] - orig_i) * inv
            t1 = (self.max[i] - orig_i) * inv

            if t0 > t1:
                t0, t1 = t1, t0

            tmin = max(tmin, t0)
            tmax = min(tmax, t1)

            if tmin > tmax:
                return False

        return True
