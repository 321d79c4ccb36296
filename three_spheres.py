from utils import *
from tracer import *
from cli import render

red = Material(vec([1.0, 0.3, 0.3]))
green = Material(vec([0.3, 1.0, 0.3]))
blue = Material(vec([0.3, 0.3, 1.0]))
gray = Material(vec([0.8, 0.8, 0.8]))

scene = Scene([
    Sphere(vec([0, 0, 0]), 1.0, red),
    Sphere(vec([-2.5, 0, -1]), 1.0, green),
    Sphere(vec([2.5, 0, -1]), 1.0, blue),
    # ground
    Sphere(vec([0, -101, 0]), 100.0, gray),
])

scene.add_light(PointLight(vec([5, 5, 5]), vec([1, 1, 1]), 0.8))
scene.add_light(PointLight(vec([-5, 3, 3]), vec([1, 0.9, 0.8]), 0.4))

camera = Camera(vec([0, 0, 5]), look_at=vec([0, 0, 0]), up=vec([0, 1, 0]), vfov=60)

print("Rendering images...")
render(camera, scene)
