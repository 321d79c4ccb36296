import numpy as np

def vec(list):
    """Handy shorthand to make a double-precision float array."""
    return np.array(list, dtype=np.float64)

def length(v):
    """Return the Euclidean length of the vector v."""
    return np.sqrt(np.dot(v, v))

def normalize(v):
    """Return a unit vector in the direction of the vector v.

    The zero vector normalizes to the zero vector.
    """
    n = length(v)
    if n > 0:
        return v / n
    return np.zeros_like(v, dtype=np.float64)


def to_rgb8(img):
    """Quantize linear color values to 8 bits by scaling and truncating.

    Each channel becomes min(255, max(0, int(c * 255))). NaN goes to 0.
    """
    scaled = np.trunc(np.asarray(img, dtype=np.float64) * 255.0)
    scaled = np.nan_to_num(scaled, nan=0.0, posinf=255.0, neginf=0.0)
    return np.clip(scaled, 0, 255).astype(np.uint8)
