import unittest
import numpy as np
from tracer import *
from ImLite import Image
from utils import normalize, vec, length

def assert_direction_matches(v, w):
    np.testing.assert_almost_equal(normalize(v), normalize(w))


class TestVectors(unittest.TestCase):

    def test_normalize(self):
        np.testing.assert_almost_equal(normalize(vec([3, 0, 4])), [0.6, 0, 0.8])
        self.assertAlmostEqual(length(normalize(vec([1, -2, 7]))), 1.0)

    def test_normalize_zero_is_zero(self):
        np.testing.assert_array_equal(normalize(vec([0, 0, 0])), [0, 0, 0])

    def test_vec_is_double(self):
        self.assertEqual(vec([1, 2, 3]).dtype, np.float64)


class TestRay(unittest.TestCase):

    def test_direction_is_normalized(self):
        ray = Ray(vec([1, 2, 3]), vec([0, 0, -7]))
        np.testing.assert_almost_equal(ray.direction, [0, 0, -1])
        np.testing.assert_almost_equal(ray.at(2.5), [1, 2, 0.5])


class TestSphereIntersect(unittest.TestCase):

    def confirm_hit(self, sphere, ray, t_min=T_MIN, t_max=np.inf):
        # make sure hit is self-consistent, then return it
        hit = sphere.intersect(ray, t_min, t_max)
        self.assertLess(hit.t, np.inf)
        self.assertGreaterEqual(hit.t, t_min)
        self.assertLessEqual(hit.t, t_max)
        np.testing.assert_almost_equal(ray.origin + hit.t * ray.direction, hit.point)
        np.testing.assert_almost_equal(normalize(hit.point - sphere.center), hit.normal)
        self.assertAlmostEqual(np.linalg.norm(hit.point - sphere.center), sphere.radius)
        self.assertIs(hit.material, sphere.material)
        return hit

    def test_unitsphere_hits(self):
        unit_sphere = Sphere(vec([0,0,0]), 1.0, None)
        # dead center hit
        hit = self.confirm_hit(unit_sphere, Ray(vec([2.0,0.0,0.0]), vec([-1.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 1.0)
        # directions are normalized, so t is a distance
        hit = self.confirm_hit(unit_sphere, Ray(vec([3.0,0.0,0.0]), vec([-2.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 2.0)
        # off center hit
        hit = self.confirm_hit(unit_sphere, Ray(vec([1.0,0.5,0.0]), vec([-1.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 1 - np.sin(np.pi/3))
        # center hit from off axis: distance to center minus radius
        hit = self.confirm_hit(unit_sphere, Ray(vec([2.0,3.0,4.0]), vec([-2.0,-3.0,-4.0])))
        self.assertAlmostEqual(hit.t, np.sqrt(29) - 1)

    def test_unitsphere_misses(self):
        unit_sphere = Sphere(vec([0,0,0]), 1.0, None)
        # on axis miss
        hit = unit_sphere.intersect(Ray(vec([2.0,3.0,0.0]), vec([-1.0,0.0,0.0])))
        self.assertIs(hit, no_hit)
        self.assertEqual(hit.t, np.inf)
        # pointing away
        hit = unit_sphere.intersect(Ray(vec([2.0,0.0,0.0]), vec([1.0,0.0,0.0])))
        self.assertIs(hit, no_hit)

    def test_nonunit_hits(self):
        sphere = Sphere(vec([-1,-5,-7]), 3.0, None)
        hit = self.confirm_hit(sphere, Ray(vec([5.0,-5.0,-7.0]), vec([-3.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 3.0)
        hit = self.confirm_hit(sphere, Ray(vec([2.0,-3.5,-7.0]), vec([-3.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 3 * (1 - np.sin(np.pi/3)))

    def test_from_inside_takes_exit_point(self):
        sphere = Sphere(vec([0,0,0]), 2.0, None)
        hit = self.confirm_hit(sphere, Ray(vec([0,0,0]), vec([0,1,0])))
        self.assertAlmostEqual(hit.t, 2.0)
        np.testing.assert_almost_equal(hit.normal, [0, 1, 0])

    def test_range_limits(self):
        sphere = Sphere(vec([0,0,-5]), 1.0, None)
        ray = Ray(vec([0,0,0]), vec([0,0,-1]))
        # near root beyond t_max
        self.assertIs(sphere.intersect(ray, T_MIN, 3.0), no_hit)
        # t_max bound is inclusive
        hit = self.confirm_hit(sphere, ray, T_MIN, 4.0)
        self.assertAlmostEqual(hit.t, 4.0)
        # near root below t_min falls through to the far root
        hit = self.confirm_hit(sphere, ray, 4.5, np.inf)
        self.assertAlmostEqual(hit.t, 6.0)

    def test_origin_on_surface_skips_self(self):
        sphere = Sphere(vec([0,0,0]), 1.0, None)
        # leaving the surface outward: t=0 is rejected by the epsilon
        self.assertIs(sphere.intersect(Ray(vec([0,0,1]), vec([0,0,1]))), no_hit)

    def test_normal(self):
        sphere = Sphere(vec([1,2,3]), 2.0, None)
        rng = np.random.default_rng(7)
        for _ in range(20):
            d = normalize(rng.normal(size=3))
            p = sphere.center + sphere.radius * d
            n = sphere.normal(p)
            self.assertAlmostEqual(length(n), 1.0)
            self.assertGreater(np.dot(p - sphere.center, n), 0)


class TestCamera(unittest.TestCase):

    def test_center_ray(self):
        cam = Camera(vec([0,0,5]), vec([0,0,0]), vec([0,1,0]), 60)
        ray = cam.generate_ray(4, 3, 8, 6)
        np.testing.assert_almost_equal(ray.origin, [0,0,5])
        np.testing.assert_almost_equal(ray.direction, [0,0,-1])

    def test_corners(self):
        # FOV is 90 degrees and the image square, so corner rays are centered in octants
        cam = Camera(vec([0,0,0]), vec([0,0,-1]), vec([0,1,0]), 90)
        assert_direction_matches(cam.generate_ray(0, 0, 10, 10).direction, vec([-1, 1,-1]))
        assert_direction_matches(cam.generate_ray(10, 0, 10, 10).direction, vec([ 1, 1,-1]))
        assert_direction_matches(cam.generate_ray(0, 10, 10, 10).direction, vec([-1,-1,-1]))

    def test_fov_and_aspect(self):
        vfov = 60
        cam = Camera(vec([0,0,0]), vec([0,0,-1]), vec([0,1,0]), vfov)
        s = np.tan(vfov/2 * np.pi/180)
        # top middle of the image is tilted up by half the fov
        assert_direction_matches(cam.generate_ray(10, 0, 20, 10).direction, vec([0, s, -1]))
        # right middle is scaled by the aspect ratio
        assert_direction_matches(cam.generate_ray(20, 5, 20, 10).direction, vec([2 * s, 0, -1]))

    def test_square_frame(self):
        # A camera with a frame where up is the view z axis
        cam = Camera(vec([1,2,2]), vec([1,4,2]), vec([0,0,1]), 90)
        ray = cam.generate_ray(5, 5, 10, 10)
        np.testing.assert_almost_equal(ray.origin, [1,2,2])
        assert_direction_matches(ray.direction, vec([0,1,0]))
        # top left corner: right is +x, so left is -x, top is +z
        assert_direction_matches(cam.generate_ray(0, 0, 10, 10).direction, vec([-1, 1, 1]))

    def test_arbitrary_frame(self):
        eye = vec([3,4,5])
        target = vec([6,7,8])
        cam = Camera(eye, target, vec([1,2,3]), 47)
        ray = cam.generate_ray(50, 40, 100, 80)
        np.testing.assert_almost_equal(ray.origin, eye)
        assert_direction_matches(ray.direction, target - eye)
        forward, right, true_up = cam.basis()
        self.assertAlmostEqual(np.dot(forward, right), 0)
        self.assertAlmostEqual(np.dot(forward, true_up), 0)
        self.assertAlmostEqual(length(true_up), 1)

    def test_degenerate_frame(self):
        cam = Camera(vec([0,0,0]), vec([0,5,0]), vec([0,1,0]), 60)
        self.assertTrue(cam.is_degenerate())
        self.assertFalse(Camera().is_degenerate())
        # every ray collapses onto the view direction
        np.testing.assert_almost_equal(cam.generate_ray(0, 0, 4, 4).direction, [0,1,0])


class TestScene(unittest.TestCase):

    def setUp(self):
        self.near = Material(vec([1, 0, 0]))
        self.far = Material(vec([0, 0, 1]))
        self.ray = Ray(vec([0,0,10]), vec([0,0,-1]))

    def test_empty_scene(self):
        self.assertIs(Scene().intersect(self.ray), no_hit)
        self.assertFalse(Scene().is_in_shadow(vec([0,0,0]), vec([0,10,0])))

    def test_closest_wins_regardless_of_order(self):
        near = Sphere(vec([0,0,2]), 1.0, self.near)
        far = Sphere(vec([0,0,-3]), 1.0, self.far)
        for spheres, index in (([near, far], 0), ([far, near], 1)):
            hit = Scene(spheres).intersect(self.ray)
            self.assertAlmostEqual(hit.t, 7.0)
            self.assertIs(hit.material, self.near)
            self.assertEqual(hit.index, index)

    def test_add_sphere_and_light(self):
        scene = Scene()
        scene.add_sphere(Sphere(vec([0,0,0]), 1.0, self.near))
        scene.add_light(PointLight(vec([0,5,0])))
        self.assertEqual(len(scene.spheres), 1)
        np.testing.assert_array_equal(scene.lights[0].color, [1, 1, 1])
        self.assertEqual(scene.lights[0].intensity, 1.0)
        np.testing.assert_array_equal(scene.ambient, [0.1, 0.1, 0.1])
        self.assertEqual(scene.intersect(self.ray).index, 0)

    def test_shadow_blocked(self):
        scene = Scene([Sphere(vec([0,2,0]), 0.5, self.near)])
        self.assertTrue(scene.is_in_shadow(vec([0,0,0]), vec([0,5,0])))

    def test_shadow_occluder_beyond_light(self):
        scene = Scene([Sphere(vec([0,8,0]), 0.5, self.near)])
        self.assertFalse(scene.is_in_shadow(vec([0,0,0]), vec([0,5,0])))

    def test_shadow_off_axis(self):
        scene = Scene([Sphere(vec([3,2,0]), 0.5, self.near)])
        self.assertFalse(scene.is_in_shadow(vec([0,0,0]), vec([0,5,0])))

    def test_tie_goes_to_later_sphere(self):
        # coincident spheres hit at the same t; t_max is inclusive so the later one wins
        first = Sphere(vec([0,0,0]), 1.0, self.near)
        second = Sphere(vec([0,0,0]), 1.0, self.far)
        hit = Scene([first, second]).intersect(self.ray)
        self.assertAlmostEqual(hit.t, 9.0)
        self.assertEqual(hit.index, 1)
        self.assertIs(hit.material, self.far)

    def test_occluder_at_light_distance(self):
        # the sphere surface is hit at exactly t=5, the distance to the light
        scene = Scene([Sphere(vec([0,6,0]), 1.0, self.near)])
        self.assertEqual(scene.intersect(Ray(vec([0,0,0]), vec([0,1,0]))).t, 5.0)
        self.assertFalse(scene.is_in_shadow(vec([0,0,0]), vec([0,5,0])))


def single_sphere_scene(lights=None, ambient=(0.1, 0.1, 0.1)):
    if lights is None:
        lights = [PointLight(vec([5,5,5]), vec([1,1,1]), 0.8)]
    scene = Scene([Sphere(vec([0,0,0]), 1.0, Material(vec([1, 0.3, 0.3])))], lights, vec(ambient))
    camera = Camera(vec([0,0,5]), vec([0,0,0]), vec([0,1,0]), 60)
    return camera, scene


class TestShading(unittest.TestCase):

    W, H = 8, 6

    def pixel(self, camera, scene, mode, x=4, y=3):
        return trace_pixel(camera, scene, x, y, self.W, self.H, mode)

    def test_center_hit_distance(self):
        camera, scene = single_sphere_scene()
        hit = scene.intersect(camera.generate_ray(4, 3, self.W, self.H))
        self.assertAlmostEqual(hit.t, 4.0)
        np.testing.assert_allclose(self.pixel(camera, scene, RenderMode.DISTANCE), [0.8, 0.8, 0.8])

    def test_center_material(self):
        camera, scene = single_sphere_scene()
        np.testing.assert_array_equal(self.pixel(camera, scene, RenderMode.MATERIAL), [1, 0.3, 0.3])

    def test_center_diffuse(self):
        camera, scene = single_sphere_scene()
        material = vec([1, 0.3, 0.3])
        point = vec([0, 0, 1])
        n = vec([0, 0, 1])
        l = normalize(vec([5, 5, 5]) - point)
        expected = vec([0.1, 0.1, 0.1]) * material + material * vec([1, 1, 1]) * max(0.0, np.dot(n, l)) * 0.8
        np.testing.assert_allclose(self.pixel(camera, scene, RenderMode.DIFFUSE), expected, atol=1e-6)
        # nothing blocks the only light
        np.testing.assert_allclose(self.pixel(camera, scene, RenderMode.SHADOW), expected, atol=1e-6)

    def test_background_in_every_mode(self):
        camera, scene = single_sphere_scene()
        for mode in RenderMode:
            np.testing.assert_array_equal(self.pixel(camera, scene, mode, x=0, y=0), [0.5, 0.7, 1.0])
            np.testing.assert_array_equal(self.pixel(camera, Scene(), mode), [0.5, 0.7, 1.0])

    def test_far_hits_clip_to_black(self):
        scene = Scene([Sphere(vec([0,0,-30]), 1.0, Material())])
        camera = Camera(vec([0,0,0]), vec([0,0,-1]), vec([0,1,0]), 60)
        np.testing.assert_array_equal(self.pixel(camera, scene, RenderMode.DISTANCE), [0, 0, 0])

    def test_no_light_no_ambient_is_black(self):
        camera, scene = single_sphere_scene(lights=[], ambient=(0, 0, 0))
        im = render_image(camera, scene, Image.Zeros((self.H, self.W)), RenderMode.DIFFUSE)
        hits = np.any(im.pixels != BACKGROUND_COLOR, axis=2)
        self.assertTrue(hits.any())
        np.testing.assert_array_equal(im.pixels[hits], 0)

    def test_diffuse_is_unclamped(self):
        camera, scene = single_sphere_scene(lights=[PointLight(vec([0,0,10]), intensity=5.0)])
        color = self.pixel(camera, scene, RenderMode.DIFFUSE)
        self.assertGreater(color[0], 1.0)

    def test_light_order_does_not_matter(self):
        a = PointLight(vec([5,5,5]), vec([1,1,1]), 0.8)
        b = PointLight(vec([-5,3,3]), vec([1,0.9,0.8]), 0.4)
        camera, s1 = single_sphere_scene(lights=[a, b])
        _, s2 = single_sphere_scene(lights=[b, a])
        np.testing.assert_allclose(self.pixel(camera, s1, RenderMode.DIFFUSE),
                                   self.pixel(camera, s2, RenderMode.DIFFUSE))

    def test_shadowed_point_gets_only_ambient(self):
        ground = Material(vec([0.5, 0.5, 0.5]))
        scene = Scene([
            Sphere(vec([0,-101,0]), 100.0, ground),
            Sphere(vec([0,1,0]), 0.5, Material()),
        ], [PointLight(vec([0,10,0]), intensity=1.0)], vec([0.2, 0.2, 0.2]))
        # look straight down at the ground right under the blocker
        camera = Camera(vec([0,0.2,3]), vec([0,-1,0]), vec([0,1,0]), 20)
        hit = scene.intersect(camera.generate_ray(4, 3, self.W, self.H))
        self.assertEqual(hit.index, 0)
        self.assertTrue(scene.is_in_shadow(hit.point, vec([0,10,0])))
        np.testing.assert_allclose(self.pixel(camera, scene, RenderMode.SHADOW), [0.1, 0.1, 0.1])
        self.assertGreater(self.pixel(camera, scene, RenderMode.DIFFUSE)[0], 0.1)

    def test_sphere_behind_never_shows(self):
        front = Material(vec([1, 0, 0]))
        back = Material(vec([0, 0, 1]))
        camera, _ = single_sphere_scene()
        scene = Scene([Sphere(vec([0,0,-4]), 2.0, back), Sphere(vec([0,0,0]), 1.0, front)])
        np.testing.assert_array_equal(self.pixel(camera, scene, RenderMode.MATERIAL), [1, 0, 0])


class TestRenderImage(unittest.TestCase):

    def scene(self):
        # a blocker floats over the ground under an overhead light; the view centers on its shadow
        scene = Scene([
            Sphere(vec([0,-101,0]), 100.0, Material(vec([0.8, 0.8, 0.8]))),
            Sphere(vec([0,1,0]), 0.5, Material(vec([1, 0.3, 0.3]))),
            Sphere(vec([1.2,-0.6,-0.5]), 0.4, Material(vec([0.3, 1, 0.3]))),
        ], [
            PointLight(vec([0,10,0]), vec([1,1,1]), 0.8),
            PointLight(vec([5,5,5]), vec([1,0.9,0.8]), 0.4),
        ])
        camera = Camera(vec([0,0.2,3]), vec([0,-1,0]), vec([0,1,0]), 40)
        return camera, scene

    def test_shadow_never_brighter_than_diffuse(self):
        camera, scene = self.scene()
        diffuse = render_image(camera, scene, Image.Zeros((12, 16)), RenderMode.DIFFUSE)
        shadow = render_image(camera, scene, Image.Zeros((12, 16)), "shadow")
        self.assertTrue(np.all(shadow.pixels <= diffuse.pixels + 1e-12))
        # the ground under the blocker loses the overhead light
        self.assertTrue(np.all(shadow.pixels[6, 8] < diffuse.pixels[6, 8] - 0.1))

    def test_sequential_fills_every_pixel(self):
        camera, scene = self.scene()
        im = render_image(camera, scene, Image.SolidImage((6, 8), [-1, -1, -1]), RenderMode.MATERIAL)
        self.assertTrue(np.all(im.pixels >= 0))

    def test_parallel_matches_sequential(self):
        camera, scene = self.scene()
        for mode in RenderMode:
            seq = render_image(camera, scene, Image.Zeros((9, 12)), mode)
            par = render_image(camera, scene, Image.Zeros((9, 12)), mode, workers=2)
            np.testing.assert_array_equal(par.pixels, seq.pixels)


if __name__ == '__main__':
    unittest.main()
