import numpy as np
from utils import vec

class Material:

    def __init__(self, k_d, k_s=0., p=20., k_m=0., k_a=None, k_t=0., ior=None):
        """
        Create a new material with the given parameters.

        Parameters:
          k_d : (3,) -- Diffuse coefficient (color)
          k_s : (3,) or float -- Specular coefficient
          p : float -- Specular exponent (shininess)
          k_m : float -- Mirror reflectivity in [0,1]
          k_a : (3,) -- Ambient coefficient (defaults to k_d)
          k_t : float -- Transparency (refracted fraction) in [0,1]
          ior : float -- Index of Refraction (1.5 for glass), None for opaque materials

        Materials may be shared between surfaces and are never modified after construction.
        """
        self.k_d = vec(k_d)
        self.k_s = k_s if np.isscalar(k_s) else vec(k_s)
        self.p = p
        self.k_m = float(k_m)
        self.k_a = vec(k_a) if k_a is not None else self.k_d
        self.k_t = float(k_t)
        self.ior = ior

        if not 0.0 <= self.k_m <= 1.0:
            raise ValueError(f"reflectivity k_m must be in [0, 1], got {k_m}")
        if not 0.0 <= self.k_t <= 1.0:
            raise ValueError(f"transparency k_t must be in [0, 1], got {k_t}")
        if self.k_m + self.k_t > 1.0:
            raise ValueError(f"k_m + k_t must not exceed 1, got {self.k_m + self.k_t}")
        if ior is not None and ior <= 0:
            raise ValueError(f"index of refraction must be positive, got {ior}")
        if self.k_t > 0 and ior is None:
            raise ValueError("a transparent material needs an index of refraction")

    @property
    def is_reflective(self):
        return self.k_m > 0

    @property
    def is_refractive(self):
        return self.k_t > 0
