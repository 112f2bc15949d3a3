import time
from multiprocessing import Pool, cpu_count

import numpy as np
from utils import reflect, refract
from ray import Ray, EPSILON

"""
Recursive Whitted-style ray tracing and the frame loop that drives it.
"""

MAX_DEPTH = 5 # max recursion depth


def shadow_transmission(scene, point, normal, to_light, dist, max_hops=MAX_DEPTH):
    """Fraction of a light's energy that reaches point through the scene.

    Opaque blockers stop the light entirely; transparent ones let k_t of it
    through and the walk continues behind them, for at most max_hops blockers.

    Parameters:
      scene : Scene -- the scene, for shadow rays
      point : (3,) -- the shaded point
      normal : (3,) -- the unit normal at point, facing the viewer
      to_light : (3,) -- unit direction from point toward the light
      dist : float -- distance to the light, np.inf for directional lights
    Return:
      float -- 1.0 when unoccluded, 0.0 when fully blocked
    """
    origin = point + EPSILON * normal
    remaining = dist
    transmission = 1.0
    for _ in range(max_hops + 1):
        blocker = scene.intersect(Ray(origin, to_light, end=remaining))
        if blocker.t == np.inf:
            return transmission
        if not blocker.material.is_refractive:
            return 0.0
        transmission *= blocker.material.k_t
        origin = blocker.point + EPSILON * to_light
        remaining = remaining - blocker.t - EPSILON
        if remaining <= 0:
            return transmission
    return 0.0


def direct_light(ray, hit, scene, max_depth=MAX_DEPTH):
    """Diffuse and specular light arriving straight from the scene's lights.

    Parameters:
      ray : Ray -- the ray that hit the surface
      hit : Hit -- the hit data
      scene : Scene -- the scene, for lights and shadow rays
    Return:
      (3,) -- the light reflected from the surface toward the ray origin
    """
    mat = hit.material
    n = hit.normal
    view_vec = -ray.direction
    color = np.zeros(3)

    for light in scene.lights:
        for to_light, dist, radiance in light.samples(hit.point):
            cos_theta = np.dot(n, to_light)
            if cos_theta <= 0:
                continue
            transmission = shadow_transmission(scene, hit.point, n, to_light, dist, max_depth)
            if transmission == 0.0:
                continue

            diffuse = mat.k_d * cos_theta
            mirror_vec = reflect(-to_light, n)
            specular = mat.k_s * (max(0.0, np.dot(mirror_vec, view_vec)) ** mat.p)

            color += transmission * radiance * (diffuse + specular)

    return color


def reflected_ray(ray, hit):
    """The mirror ray leaving the hit point."""
    return Ray(hit.point + EPSILON * hit.normal, reflect(ray.direction, hit.normal))


def refracted_ray(ray, hit):
    """The transmitted ray leaving the hit point, or None on total internal reflection."""
    ior = hit.material.ior
    eta = 1.0 / ior if hit.front_face else ior
    direction = refract(ray.direction, hit.normal, eta)
    if direction is None:
        return None
    return Ray(hit.point - EPSILON * hit.normal, direction)


def shade(ray, hit, scene, depth=0, max_depth=MAX_DEPTH):
    """Compute shading for a ray-surface intersection.

    Parameters:
      ray : Ray -- the ray that hit the surface
      hit : Hit -- the hit data
      scene : Scene -- the scene
      depth : int -- the recursion depth so far
      max_depth : int -- the recursion limit
    Return:
      (3,) -- the color seen along this ray, not yet clamped
    When mirror reflection or refraction is being computed, recursion will only
    proceed to a depth of max_depth, with zero contribution beyond that depth.
    """
    mat = hit.material
    local = mat.k_a * scene.ambient + direct_light(ray, hit, scene, max_depth)
    color = (1.0 - mat.k_m - mat.k_t) * local

    if depth >= max_depth:
        return color

    if mat.is_reflective:
        color = color + mat.k_m * trace(reflected_ray(ray, hit), scene, depth + 1, max_depth)

    if mat.is_refractive:
        transmitted = refracted_ray(ray, hit)
        if transmitted is None:
            # total internal reflection
            transmitted = reflected_ray(ray, hit)
        color = color + mat.k_t * trace(transmitted, scene, depth + 1, max_depth)

    return color


def trace(ray, scene, depth=0, max_depth=MAX_DEPTH):
    """Return the color seen along ray, with every channel in [0,1].

    Parameters:
      ray : Ray -- the ray to follow
      scene : Scene -- the scene
      depth : int -- the number of bounces that led to this ray
      max_depth : int -- the recursion limit
    """
    hit = scene.intersect(ray)
    if hit.t == np.inf:
        return scene.bg_color.copy()
    return np.clip(shade(ray, hit, scene, depth, max_depth), 0, 1)


def render_row(scene, i, nx, ny, max_depth=MAX_DEPTH):
    """Render row i of an nx by ny image."""
    row = np.zeros((nx, 3), np.float32)
    for j in range(nx):
        ray = scene.cast_camera_ray(j, i, nx, ny)
        row[j] = trace(ray, scene, 0, max_depth)
    return row


# Per-process render state, set by the pool initializer
_worker_data = {}

def _init_worker(scene, nx, ny, max_depth):
    _worker_data['scene'] = scene
    _worker_data['nx'] = nx
    _worker_data['ny'] = ny
    _worker_data['max_depth'] = max_depth

def _render_row(i):
    d = _worker_data
    return i, render_row(d['scene'], i, d['nx'], d['ny'], d['max_depth'])


def render_image(scene, nx, ny, max_depth=MAX_DEPTH, workers=1, verbose=False):
    """Render a ray traced image.

    Parameters:
      scene : Scene -- the scene to be rendered, including its camera and lights
      nx, ny : int -- the dimensions of the rendered image
      max_depth : int -- the recursion limit for reflected and refracted rays
      workers : int -- number of processes; None uses every CPU
      verbose : bool -- print row progress
    Returns:
      (ny, nx, 3) float32 -- the linear RGB image, row 0 at the top
    """
    if nx < 1 or ny < 1:
        raise ValueError(f"image size must be positive, got {nx}x{ny}")
    if workers is None:
        workers = cpu_count()

    output_image = np.zeros((ny, nx, 3), np.float32)
    start_time = time.time()

    if workers <= 1:
        for i in range(ny):
            output_image[i] = render_row(scene, i, nx, ny, max_depth)
            if verbose:
                print(f"rendering row {i+1}/{ny}...")
        return output_image

    if verbose:
        print(f"Rendering with {workers} processes...")
    with Pool(processes=workers, initializer=_init_worker,
              initargs=(scene, nx, ny, max_depth)) as pool:
        completed = 0
        for i, row in pool.imap_unordered(_render_row, range(ny)):
            output_image[i] = row
            completed += 1
            if verbose:
                elapsed = time.time() - start_time
                eta = elapsed / completed * (ny - completed)
                print(f"Row {completed}/{ny} | Elapsed: {elapsed:.1f}s | ETA: {eta:.1f}s    ", end='\r')
    if verbose:
        print()
    return output_image
