from utils import vec


class Material:

    def __init__(self, color=None):
        """
        Create a new material with the given base color.

        Parameters:
          color : (3,) -- base reflectance (RGB), conventionally in [0,1] but not clamped.
                          Defaults to white.
        """
        self.color = vec(color) if color is not None else vec([1.0, 1.0, 1.0])

    def __repr__(self):
        return "Material(color={})".format(self.color.tolist())
