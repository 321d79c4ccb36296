from PIL import Image as PIM
import os
import numpy as np

import matplotlib.pyplot as plt

from utils import to_rgb8


class Image(object):
    """Image

    Float RGB buffer of shape (height, width, 3), row-major, top row first.
    Renderers write into it with setPixel; writeToFile / writePPM serialize it.
    """

    def __init__(self, path=None, pixels=None, **kwargs):
        # You can do Image(pixels) or Image(path)
        self._samples = None;
        self.file_path = None;
        if (isinstance(path, np.ndarray) and (pixels is None)):
            # if the path looks like pixels and pixels are undefined, treat the path as pixels
            self.pixels = path;
        else:
            self.pixels = pixels;
            self.file_path = path;
            if(self.file_path is not None and pixels is None):
                self.loadImageData(self.file_path);

    def clone(self):
        selfclass = type(self);
        new_copy = selfclass(pixels=self.pixels.copy());
        new_copy.file_path = self.file_path;
        return new_copy;

    @property
    def pixels(self):
        return self.samples;

    @pixels.setter
    def pixels(self, data):
        self.samples = data;

    @property
    def samples(self):
        return self._samples;

    @samples.setter
    def samples(self, value):
        self._samples = value;

    @property
    def dtype(self):
        return self.pixels.dtype;

    @property
    def ipixels(self):
        """8-bit pixels: each channel is min(255, max(0, int(c*255)))."""
        if (self.dtype.kind in 'iu'):
            return np.clip(self.pixels, 0, 255).astype(np.uint8);
        return to_rgb8(self.pixels);

    @property
    def shape(self):
        return np.asarray(self.pixels.shape)[:];

    @property
    def width(self):
        return int(self.shape[1]);

    @property
    def height(self):
        return int(self.shape[0]);

    def _inBounds(self, x, y):
        return (0 <= x < self.width) and (0 <= y < self.height);

    def setPixel(self, x, y, color):
        """Write one pixel; writes outside the buffer are ignored."""
        if (self._inBounds(x, y)):
            self.pixels[y, x] = color;

    def getPixel(self, x, y):
        """Read one pixel; reads outside the buffer return black."""
        if (self._inBounds(x, y)):
            return self.pixels[y, x].copy();
        return np.zeros(3);

    def loadImageData(self, path=None):
        if (path):
            self.file_path = path;
        if (self.file_path):
            pim = PIM.open(fp=self.file_path).convert('RGB');
            self._samples = np.array(pim);

    @staticmethod
    def SolidRGBPixels(shape, color=None):
        if (color is None):
            color = [0, 0, 0];
        rblock = np.ones((shape[0], shape[1], 3));
        rblock[:] = color;
        return rblock;

    @classmethod
    def SolidImage(cls, shape, color=None):
        if (color is None or len(color) == 3):
            return cls(pixels=cls.SolidRGBPixels(shape, color));
        else:
            raise NotImplementedError;

    @classmethod
    def Zeros(cls, shape):
        if (len(shape) == 2):
            shape = (shape[0], shape[1], 3);
        return cls(pixels=np.zeros(shape, dtype=np.float64));

    def PIL(self):
        return PIM.fromarray(self.ipixels);

    def writePPM(self, output_path):
        """Write the plain-text PPM (P3) format, one line of 'r g b ' triples per row."""
        ipix = self.ipixels;
        with open(output_path, 'w') as f:
            f.write("P3\n{} {}\n255\n".format(self.width, self.height));
            for row in ipix:
                f.write("".join("{} {} {} ".format(*px) for px in row));
                f.write("\n");

    def writeToFile(self, output_path=None, **kwargs):
        """Save the image; '.ppm' paths use writePPM, anything else goes through Pillow."""
        if (os.path.splitext(str(output_path))[1].lower() == '.ppm'):
            self.writePPM(output_path);
        else:
            self.PIL().save(output_path, **kwargs);

    @staticmethod
    def Show(im, title=None, new_figure=True, axis=None, **kwargs):
        if (isinstance(im, Image)):
            imdata = im.ipixels;
        else:
            imdata = im;

        if (new_figure and axis is None):
            if (title is not None):
                plt.figure(num=title);
            else:
                plt.figure();
        if (axis is not None):
            axis.imshow(imdata, **kwargs);
            axis.axis('off');
            if (title):
                axis.set_title(title);
        else:
            plt.imshow(imdata, **kwargs);
            plt.axis('off');
            if (title):
                plt.title(title);

    @classmethod
    def SaveStagesFigure(cls, images, titles, output_path, dpi=100):
        """Save a one-row matplotlib figure with a titled panel per image."""
        fig, axes = plt.subplots(1, len(images), figsize=(4 * len(images), 3.4), squeeze=False);
        for im, title, axis in zip(images, titles, axes[0]):
            Image.Show(im, title=title, new_figure=False, axis=axis);
        fig.tight_layout();
        fig.savefig(output_path, dpi=dpi);
        plt.close(fig);

    @classmethod
    def StackImages(cls, images, concatdim=0, **kwargs):
        matchdim = (concatdim + 1) % 2;
        newframe = images[0].clone().pixels;
        for vn in range(1, len(images)):
            addpart = images[vn].pixels;
            if (addpart.shape[matchdim] != newframe.shape[matchdim]):
                raise ValueError("cannot stack images of shape {} and {} along dim {}".format(
                    newframe.shape, addpart.shape, concatdim));
            newframe = np.concatenate((newframe, addpart), concatdim);
        return cls(pixels=newframe)
