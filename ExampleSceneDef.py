import tracer
from ImLite import *
from utils import *


class ExampleSceneDef(object):
    def __init__(self, camera, scene):
        self.camera = camera;
        self.scene = scene;

    def render(self, mode, output_path=None, output_shape=None, workers=None, verbose=False):
        """Render one stage; returns the Image, or writes it when output_path is given."""
        if(output_shape is None):
            output_shape=[600, 800];
        im = Image.Zeros(output_shape);
        tracer.render_image(self.camera, self.scene, im, mode, workers=workers, verbose=verbose);
        if(output_path is None):
            return im;
        else:
            im.writeToFile(output_path);
            return im;


def DefaultSceneExample():
    red = tracer.Material(vec([1.0, 0.3, 0.3]))
    green = tracer.Material(vec([0.3, 1.0, 0.3]))
    blue = tracer.Material(vec([0.3, 0.3, 1.0]))
    ground = tracer.Material(vec([0.8, 0.8, 0.8]))

    scene = tracer.Scene([
        tracer.Sphere(vec([0, 0, 0]), 1.0, red),
        tracer.Sphere(vec([-2.5, 0, -1]), 1.0, green),
        tracer.Sphere(vec([2.5, 0, -1]), 1.0, blue),
        tracer.Sphere(vec([0, -101, 0]), 100.0, ground),
    ], lights=[
        tracer.PointLight(vec([5, 5, 5]), vec([1, 1, 1]), 0.8),
        tracer.PointLight(vec([-5, 3, 3]), vec([1, 0.9, 0.8]), 0.4),
    ], ambient=vec([0.1, 0.1, 0.1]))

    camera = tracer.Camera(vec([0, 0, 5]), look_at=vec([0, 0, 0]), up=vec([0, 1, 0]), vfov=60)
    return ExampleSceneDef(camera=camera, scene=scene);


def SingleSphereExample():
    red = tracer.Material(vec([1.0, 0.3, 0.3]))

    scene = tracer.Scene([
        tracer.Sphere(vec([0, 0, 0]), 1.0, red),
    ], lights=[
        tracer.PointLight(vec([5, 5, 5]), vec([1, 1, 1]), 0.8),
    ], ambient=vec([0.1, 0.1, 0.1]))

    camera = tracer.Camera(vec([0, 0, 5]), look_at=vec([0, 0, 0]), up=vec([0, 1, 0]), vfov=60)
    return ExampleSceneDef(camera=camera, scene=scene);


def OccludedSpheresExample():
    front = tracer.Material(vec([0.9, 0.6, 0.2]))
    back = tracer.Material(vec([0.2, 0.4, 0.9]))
    ground = tracer.Material(vec([0.7, 0.7, 0.7]))

    # The back sphere sits on the view axis behind the front one and should never show there
    scene = tracer.Scene([
        tracer.Sphere(vec([0, 0, -4]), 1.5, back),
        tracer.Sphere(vec([0, 0, 0]), 1.0, front),
        tracer.Sphere(vec([0, -101, 0]), 100.0, ground),
    ], lights=[
        tracer.PointLight(vec([0, 8, 2]), vec([1, 1, 1]), 1.0),
    ], ambient=vec([0.05, 0.05, 0.05]))

    camera = tracer.Camera(vec([0, 0.5, 6]), look_at=vec([0, 0, 0]), up=vec([0, 1, 0]), vfov=50)
    return ExampleSceneDef(camera=camera, scene=scene);


SCENES = {
    'default': DefaultSceneExample,
    'single': SingleSphereExample,
    'occluded': OccludedSpheresExample,
}
