import multiprocessing as mp
import time
from enum import Enum

import numpy as np
from materials import Material
from geometry import Sphere, no_hit, T_MIN
from utils import *

"""
Core implementation of the ray tracer: rays, lights, the scene container, the
camera, and the four shading stages (distance, material, diffuse, shadowed
diffuse) together with the `render_image` driver that fills an image buffer.

Vectors and colors are (3,) float64 NumPy arrays. Callers are trusted to pass
well-formed data; nothing here validates its inputs.
"""

# Color of pixels whose primary ray misses every sphere
BACKGROUND_COLOR = vec([0.5, 0.7, 1.0])

# Hit distance that maps to black in the distance stage
DISTANCE_RANGE = 20.0


class Ray:

    def __init__(self, origin, direction):
        """Create a ray with the given origin and direction.

        Parameters:
          origin : (3,) -- the start point of the ray, a 3D point
          direction : (3,) -- the direction of the ray (normalized here)
        """
        self.origin = np.array(origin, np.float64)
        self.direction = normalize(np.array(direction, np.float64))

    def at(self, t):
        """Point at parameter t along the ray."""
        return self.origin + self.direction * t


class PointLight:
    def __init__(self, position, color=None, intensity=1.0):
        """Create a point light at given position, with given color and intensity.

        There is no falloff with distance.
        """
        self.position = vec(position)
        self.color = vec(color) if color is not None else vec([1.0, 1.0, 1.0])
        self.intensity = float(intensity)

    def contribution(self, hit, material_color):
        """Lambertian contribution of this light at a surface point."""
        to_light = normalize(self.position - hit.point)
        diffuse = max(0.0, np.dot(hit.normal, to_light))
        return material_color * self.color * (diffuse * self.intensity)


class Scene:

    def __init__(self, spheres=(), lights=(), ambient=None):
        """Create a scene containing the given spheres and lights.

        Parameters:
          spheres : sequence of Sphere -- scanned in insertion order
          lights : sequence of PointLight
          ambient : (3,) -- ambient light color, defaults to (0.1, 0.1, 0.1)
        """
        self.spheres = list(spheres)
        self.lights = list(lights)
        self.ambient = vec(ambient) if ambient is not None else vec([0.1, 0.1, 0.1])

    def add_sphere(self, sphere):
        self.spheres.append(sphere)

    def add_light(self, light):
        self.lights.append(light)

    def intersect(self, ray, t_min=T_MIN):
        """Computes the first (smallest t) intersection between a ray and the scene.

        Each sphere is tested against the closest t found so far, so a later
        sphere only wins if it is at least as close.
        Return:
          Hit -- the winning hit with its sphere index, or no_hit
        """
        closest = no_hit
        for i, sphere in enumerate(self.spheres):
            hit = sphere.intersect(ray, t_min, closest.t)
            if hit is not no_hit:
                hit.index = i
                closest = hit
        return closest

    def is_in_shadow(self, point, light_position):
        """Return True if a sphere lies strictly between point and the light."""
        to_light = light_position - point
        dist_to_light = length(to_light)
        hit = self.intersect(Ray(point, to_light), T_MIN)
        return hit.t < dist_to_light


class Camera:

    def __init__(self, position=vec([0, 0, 5]), look_at=vec([0, 0, 0]), up=vec([0, 1, 0]),
                 vfov=60.0):
        """Create a camera with given viewing parameters.

        Parameters:
          position : (3,) -- eye point
          look_at : (3,) -- point the camera looks at
          up : (3,) -- approximate up direction
          vfov : float -- vertical field of view in degrees
        """
        self.position = vec(position)
        self.look_at = vec(look_at)
        self.up = vec(up)
        self.vfov = float(vfov)

    def basis(self):
        """Return the (forward, right, true_up) frame of the camera."""
        forward = normalize(self.look_at - self.position)
        right = normalize(np.cross(forward, self.up))
        true_up = np.cross(right, forward)
        return forward, right, true_up

    def is_degenerate(self):
        """True when the view direction is parallel to up and the frame collapses."""
        _, right, _ = self.basis()
        return not np.any(right)

    def generate_ray(self, u, v, width, height):
        """Compute the primary ray through pixel (u, v) of a width x height image.

        Row 0 is the top of the image.
        """
        forward, right, true_up = self.basis()

        scale = np.tan(np.radians(self.vfov) / 2.0)
        aspect = width / height

        x = (2.0 * u / width - 1.0) * aspect * scale
        y = (1.0 - 2.0 * v / height) * scale

        return Ray(self.position, normalize(forward + right * x + true_up * y))


def shade_distance(ray, hit, scene):
    """Grayscale by hit distance: white at the eye, black from DISTANCE_RANGE on."""
    d = 1.0 - min(1.0, hit.t / DISTANCE_RANGE)
    return vec([d, d, d])

def shade_material(ray, hit, scene):
    """Flat base color of the hit sphere."""
    return hit.material.color.copy()

def shade_diffuse(ray, hit, scene, shadows=False):
    """Ambient plus Lambertian shading summed over the lights, unclamped.

    With shadows, a light is skipped when the point cannot see it. Ambient is
    never shadowed.
    """
    material_color = hit.material.color
    color = scene.ambient * material_color
    for light in scene.lights:
        if shadows and scene.is_in_shadow(hit.point, light.position):
            continue
        color = color + light.contribution(hit, material_color)
    return color

def shade_shadow(ray, hit, scene):
    return shade_diffuse(ray, hit, scene, shadows=True)


class RenderMode(Enum):
    DISTANCE = "distance"
    MATERIAL = "material"
    DIFFUSE = "diffuse"
    SHADOW = "shadow"

SHADERS = {
    RenderMode.DISTANCE: shade_distance,
    RenderMode.MATERIAL: shade_material,
    RenderMode.DIFFUSE: shade_diffuse,
    RenderMode.SHADOW: shade_shadow,
}


def trace_pixel(camera, scene, x, y, width, height, mode):
    """Color of pixel (x, y) under the given render mode."""
    ray = camera.generate_ray(x, y, width, height)
    hit = scene.intersect(ray)
    if hit is no_hit:
        return BACKGROUND_COLOR.copy()
    return SHADERS[RenderMode(mode)](ray, hit, scene)


def _render_row_chunk(args):
    """Render rows [y_start, y_end) and return them as an array (pool worker)."""
    y_start, y_end, camera, scene, width, height, mode = args
    rows = np.zeros((y_end - y_start, width, 3), np.float64)
    for i, y in enumerate(range(y_start, y_end)):
        for x in range(width):
            rows[i, x] = trace_pixel(camera, scene, x, y, width, height, mode)
    return y_start, y_end, rows


def render_image(camera, scene, image, mode, workers=None, verbose=False):
    """
    Render the scene into `image` (an ImLite.Image) with the given mode.

    With workers > 1 the rows are split into chunks rendered by a process pool;
    the result is identical to the sequential render. Returns the image.
    """
    mode = RenderMode(mode)
    nx, ny = image.width, image.height

    if workers is None or workers <= 1:
        for y in range(ny):
            if verbose:
                print(f"rendering row {y+1}/{ny}...")
            for x in range(nx):
                image.setPixel(x, y, trace_pixel(camera, scene, x, y, nx, ny, mode))
        return image

    # 4 chunks per worker for load balancing
    rows_per_chunk = max(1, ny // (workers * 4))
    chunks = []
    for y_start in range(0, ny, rows_per_chunk):
        y_end = min(y_start + rows_per_chunk, ny)
        chunks.append((y_start, y_end, camera, scene, nx, ny, mode))

    if verbose:
        print(f"Divided {ny} rows into {len(chunks)} chunks for {workers} workers")

    pool_start = time.time()
    with mp.Pool(workers) as pool:
        results = pool.map(_render_row_chunk, chunks)

    for y_start, y_end, rows in results:
        image.pixels[y_start:y_end] = rows

    if verbose:
        print(f"All chunks completed in {time.time() - pool_start:.2f}s")
    return image
