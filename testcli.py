import contextlib
import io
import os
import tempfile
import unittest

import numpy as np

import cli
from ExampleSceneDef import SCENES, SingleSphereExample, OccludedSpheresExample
from tracer import RenderMode


class TestParser(unittest.TestCase):

    def test_defaults(self):
        args = cli.build_parser().parse_args([])
        self.assertEqual((args.scene, args.mode, args.width, args.height), ('default', 'all', 800, 600))
        self.assertIsNone(args.workers)
        self.assertEqual(args.fmt, 'ppm')

    def test_rejects_bad_sizes(self):
        parser = cli.build_parser()
        for argv in (['--width', '0'], ['--height', '-3'], ['--workers', '0'], ['--mode', 'phong']):
            with contextlib.redirect_stderr(io.StringIO()):
                with self.assertRaises(SystemExit) as ctx:
                    parser.parse_args(argv)
            self.assertEqual(ctx.exception.code, 2)


class TestMain(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def run_main(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            code = cli.main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_all_stages(self):
        code, out, _ = self.run_main('--width', '8', '--height', '6', '--output-dir', self.tmp.name)
        self.assertEqual(code, 0)
        for stem in ('output_distance', 'output_materials', 'output_diffuse', 'output_final'):
            path = os.path.join(self.tmp.name, stem + '.ppm')
            with open(path) as f:
                self.assertEqual(f.readline(), "P3\n")
                self.assertEqual(f.readline(), "8 6\n")
        self.assertIn("Step e: Rendering with shadows", out)
        self.assertIn("Generated images:", out)
        self.assertIn("  - " + os.path.join(self.tmp.name, 'output_final.ppm'), out)

    def test_single_mode_png_with_figure(self):
        figure = os.path.join(self.tmp.name, 'stages.png')
        code, _, _ = self.run_main('--scene', 'single', '--mode', 'material', '--format', 'png',
                                   '--width', '8', '--height', '6', '--output-dir', self.tmp.name,
                                   '--figure', figure, '--quiet')
        self.assertEqual(code, 0)
        self.assertEqual(sorted(os.listdir(self.tmp.name)), ['output_materials.png', 'stages.png'])

    def test_quiet(self):
        code, out, _ = self.run_main('--mode', 'distance', '--width', '4', '--height', '4',
                                     '--output-dir', self.tmp.name, '--quiet')
        self.assertEqual(code, 0)
        self.assertEqual(out, "")

    def test_unwritable_output(self):
        missing = os.path.join(self.tmp.name, 'no', 'such', 'dir')
        code, _, err = self.run_main('--mode', 'distance', '--width', '4', '--height', '4',
                                     '--output-dir', missing, '--quiet')
        self.assertEqual(code, 1)
        self.assertIn("Error: could not write", err)


class TestRender(unittest.TestCase):

    def test_returns_images_per_mode(self):
        scene_def = SingleSphereExample()
        with tempfile.TemporaryDirectory() as tmp:
            images = cli.render(scene_def.camera, scene_def.scene, modes=['diffuse', RenderMode.SHADOW],
                                width=8, height=6, output_dir=tmp, verbose=False)
            self.assertEqual(list(images), [RenderMode.DIFFUSE, RenderMode.SHADOW])
            self.assertTrue(os.path.exists(os.path.join(tmp, 'output_final.ppm')))
        np.testing.assert_array_equal(images[RenderMode.DIFFUSE].pixels, images[RenderMode.SHADOW].pixels)


class TestExampleScenes(unittest.TestCase):

    def test_factories(self):
        self.assertEqual(sorted(SCENES), ['default', 'occluded', 'single'])
        default = SCENES['default']()
        self.assertEqual(len(default.scene.spheres), 4)
        self.assertEqual(len(default.scene.lights), 2)

    def test_occluded_shows_front_sphere(self):
        im = OccludedSpheresExample().render(RenderMode.MATERIAL, output_shape=[12, 16])
        np.testing.assert_array_equal(im.getPixel(8, 6), [0.9, 0.6, 0.2])

    def test_render_to_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'single.png')
            SingleSphereExample().render('distance', output_path=path, output_shape=[6, 8])
            self.assertTrue(os.path.exists(path))


if __name__ == '__main__':
    unittest.main()
