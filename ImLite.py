import os
from PIL import Image as PIM
import numpy as np

import matplotlib
import matplotlib.pyplot as plt


class Image(object):
    """Image

    Thin wrapper around a (height, width, channels) pixel array, either float in
    [0,1] or uint8 in [0,255], that knows how to read and write image files.
    """

    def __init__(self, path=None, pixels=None):
        # You can do Image(pixels) or Image(path)
        self._samples = None;
        self.file_path = None;
        if (isinstance(path, np.ndarray) and (pixels is None)):
            # if the path looks like pixels and pixels are undefined, treat the path as pixels
            pixels = path;
            path = None;
        self.pixels = pixels;
        self.file_path = path;
        if (self.file_path is not None and pixels is None):
            self.loadImageData(self.file_path);

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
    def _is_int(self):
        return (self.dtype.kind in 'iu');

    @property
    def ipixels(self):
        if (self._is_int):
            return self.pixels.astype(np.uint8);
        else:
            return np.clip(np.round(self.pixels * 255), 0, 255).astype(np.uint8);

    @property
    def shape(self):
        return np.asarray(self.pixels.shape)[:];

    @property
    def width(self):
        return int(self.shape[1]);

    @property
    def height(self):
        return int(self.shape[0]);

    def loadImageData(self, path=None):
        if (path):
            self.file_path = path;
        with PIM.open(fp=self.file_path) as pim:
            self._samples = np.array(pim.convert('RGB'));

    def PIL(self):
        return PIM.fromarray(self.ipixels);

    def writeToFile(self, output_path=None, **kwargs):
        """Encode the pixels into output_path; the format follows the file extension.

        Raises OSError if the file cannot be written and ValueError for an unknown extension.
        """
        if (output_path is None):
            output_path = self.file_path;
        if (output_path is None):
            raise ValueError("no output path given");
        self.PIL().save(output_path, **kwargs);
        self.file_path = output_path;

    @staticmethod
    def CanWrite(output_path):
        """True if Pillow knows an image format for the extension of output_path."""
        ext = os.path.splitext(output_path)[1].lower();
        return ext in PIM.registered_extensions();

    def show(self, title=None, new_figure=True, **kwargs):
        Image.Show(self, title=title, new_figure=new_figure, **kwargs);
        plt.show();

    @staticmethod
    def Show(im, title=None, new_figure=True, axis=None, **kwargs):
        if (isinstance(im, Image)):
            imdata = im.pixels;
        else:
            imdata = im;

        if (imdata.dtype == np.int64 or imdata.dtype == np.int32):
            imdata = imdata.astype(np.uint8)

        if (new_figure):
            if (title is not None):
                plt.figure(num=title);
            else:
                plt.figure();
        target = axis if axis is not None else plt;
        if (len(imdata.shape) < 3):
            if (imdata.dtype == np.uint8):
                nrm = matplotlib.colors.Normalize(vmin=0, vmax=255);
            else:
                nrm = matplotlib.colors.Normalize(vmin=0.0, vmax=1.0);
            target.imshow(imdata, cmap='gray', norm=nrm, **kwargs);
        else:
            target.imshow(imdata, **kwargs);
        plt.axis('off');
        if (title):
            plt.title(title);
