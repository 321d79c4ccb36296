import os
import tempfile
import unittest

import numpy as np
from PIL import Image as PIM

from ImLite import Image
from utils import to_rgb8


class TestQuantize(unittest.TestCase):

    def test_truncates(self):
        # 0.5*255 = 127.5 and 0.999*255 = 254.7 truncate rather than round
        np.testing.assert_array_equal(to_rgb8([0.5, 0.999, 1.0]), [127, 254, 255])

    def test_clamps(self):
        np.testing.assert_array_equal(to_rgb8([-0.3, 1.7, 42.0]), [0, 255, 255])

    def test_non_finite(self):
        np.testing.assert_array_equal(to_rgb8([np.nan, np.inf, -np.inf]), [0, 255, 0])


class TestImageBuffer(unittest.TestCase):

    def test_zeros_shape(self):
        im = Image.Zeros((3, 5))
        self.assertEqual(im.width, 5)
        self.assertEqual(im.height, 3)
        self.assertEqual(im.pixels.shape, (3, 5, 3))

    def test_set_get_pixel(self):
        im = Image.Zeros((3, 5))
        im.setPixel(4, 2, [0.1, 0.2, 0.3])
        np.testing.assert_array_equal(im.getPixel(4, 2), [0.1, 0.2, 0.3])
        # row-major: x is the column, y the row
        np.testing.assert_array_equal(im.pixels[2, 4], [0.1, 0.2, 0.3])

    def test_out_of_bounds_ignored(self):
        im = Image.Zeros((3, 5))
        for x, y in [(-1, 0), (5, 0), (0, 3), (0, -1)]:
            im.setPixel(x, y, [1, 1, 1])
            np.testing.assert_array_equal(im.getPixel(x, y), [0, 0, 0])
        self.assertEqual(np.count_nonzero(im.pixels), 0)

    def test_integer_pixels_clamp(self):
        im = Image(pixels=np.array([[[-20, 128, 300]]], dtype=np.int32))
        np.testing.assert_array_equal(im.ipixels, [[[0, 128, 255]]])
        self.assertEqual(im.ipixels.dtype, np.uint8)

    def test_solid_and_clone(self):
        im = Image.SolidImage((2, 2), [0.5, 0.7, 1.0])
        copy = im.clone()
        copy.setPixel(0, 0, [0, 0, 0])
        np.testing.assert_array_equal(im.getPixel(0, 0), [0.5, 0.7, 1.0])

    def test_stack(self):
        a = Image.SolidImage((2, 3), [1, 0, 0])
        b = Image.SolidImage((2, 4), [0, 1, 0])
        side = Image.StackImages([a, b], concatdim=1)
        self.assertEqual(side.pixels.shape, (2, 7, 3))
        np.testing.assert_array_equal(side.getPixel(6, 1), [0, 1, 0])
        with self.assertRaises(ValueError):
            Image.StackImages([a, b], concatdim=0)


class TestImageFiles(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.im = Image.Zeros((2, 3))
        self.im.setPixel(0, 0, [1.0, 0.5, 0.0])
        self.im.setPixel(2, 1, [2.0, -1.0, 0.25])

    def path(self, name):
        return os.path.join(self.tmp.name, name)

    def test_ppm_format(self):
        self.im.writeToFile(self.path("out.ppm"))
        with open(self.path("out.ppm")) as f:
            text = f.read()
        self.assertEqual(text, "P3\n3 2\n255\n"
                               "255 127 0 0 0 0 0 0 0 \n"
                               "0 0 0 0 0 0 255 0 63 \n")

    def test_ppm_round_trips_through_pillow(self):
        self.im.writePPM(self.path("out.ppm"))
        loaded = Image(self.path("out.ppm"))
        np.testing.assert_array_equal(loaded.pixels, self.im.ipixels)

    def test_png(self):
        self.im.writeToFile(self.path("out.png"))
        pim = PIM.open(self.path("out.png"))
        self.assertEqual(pim.size, (3, 2))
        self.assertEqual(pim.getpixel((2, 1)), (255, 0, 63))

    def test_unwritable_raises(self):
        with self.assertRaises(OSError):
            self.im.writeToFile(self.path("missing/dir/out.ppm"))

    def test_stages_figure(self):
        images = [Image.SolidImage((4, 6), c) for c in ([1, 0, 0], [0, 1, 0])]
        Image.SaveStagesFigure(images, ["distance", "material"], self.path("stages.png"))
        self.assertGreater(os.path.getsize(self.path("stages.png")), 0)


if __name__ == '__main__':
    unittest.main()
