import numpy as np
from utils import vec, normalize

# Minimum valid hit distance; keeps rays from hitting the surface they leave.
T_MIN = 0.001


class Hit:
    def __init__(self, t, point=None, normal=None, material=None, index=None):
        """Create a Hit with the given data.

        Parameters:
          t : float -- the t value of the intersection along the ray
          point : (3,) -- the 3D point where the intersection happens
          normal : (3,) -- the 3D outward-facing unit normal to the surface at the hit point
          material : (Material) -- the material of the surface
          index : int -- position of the hit sphere in the scene, set by Scene.intersect
        """
        self.t = t
        self.point = point
        self.normal = normal
        self.material = material
        self.index = index

# Value to represent absence of an intersection
no_hit = Hit(np.inf)


class Sphere:

    def __init__(self, center, radius, material):
        """Create a sphere with the given center and radius.

        Parameters:
          center : (3,) -- a 3D point specifying the sphere's center
          radius : float -- a Python float specifying the sphere's radius
          material : Material -- the material of the surface
        """
        self.center = vec(center)
        self.radius = float(radius)
        self.material = material

    def normal(self, point):
        """Outward unit normal at a point assumed to lie on the surface."""
        return normalize(point - self.center)

    def intersect(self, ray, t_min=T_MIN, t_max=np.inf):
        """Computes the first (smallest t) intersection between a ray and this sphere.

        Both bounds of [t_min, t_max] are inclusive. The near root is taken when it
        is in range, otherwise the far root.

        Parameters:
          ray : Ray -- the ray to intersect with the sphere
          t_min, t_max : float -- the range of accepted t values
        Return:
          Hit -- the hit data, or no_hit
        """
        oc = ray.origin - self.center
        a = np.dot(ray.direction, ray.direction)
        b = 2.0 * np.dot(oc, ray.direction)
        c = np.dot(oc, oc) - self.radius * self.radius
        discriminant = b * b - 4 * a * c
        if discriminant < 0:
            return no_hit

        disc_sqrt = np.sqrt(discriminant)
        t0 = (-b - disc_sqrt) / (2.0 * a)
        t1 = (-b + disc_sqrt) / (2.0 * a)
        if t_min <= t0 <= t_max:
            t = t0
        elif t_min <= t1 <= t_max:
            t = t1
        else:
            return no_hit

        point = ray.at(t)
        return Hit(t, point, self.normal(point), self.material)
