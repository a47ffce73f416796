# rasterizers.py
"""
Page rasterizers.

Both backends expose the same small surface:

    rasterizer.open_document(handle) -> document
    document.page_count
    document.open_page(index) -> page      (page.width, page.height)
    page.render(buffer, transform)         (buffer: RGBA PIL image)

`transform` maps page coordinates to buffer pixels. Anything the page does
not cover is left untouched (transparent on a cleared buffer).
"""
import io
import logging
import os
from typing import Union

import fitz  # pymupdf
from PIL import Image

from affine import AffineTransform, Rect
from errors import RasterizationError

log = logging.getLogger(__name__)

PDF_EXTENSIONS = {".pdf", ".xps", ".epub", ".cbz"}
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tif", ".tiff", ".webp"}


def _read_handle(handle) -> Union[str, bytes]:
    if isinstance(handle, (bytes, bytearray, memoryview)):
        return bytes(handle)
    if isinstance(handle, (str, os.PathLike)):
        return os.fspath(handle)
    if hasattr(handle, "read"):
        return handle.read()
    raise RasterizationError(f"Unsupported document handle: {type(handle).__name__}")


def _check_index(index: int, count: int):
    if not 0 <= index < count:
        raise RasterizationError(f"Page index {index} out of range (document has {count} page(s))")


# -----------------------------
# PDF (PyMuPDF)
# -----------------------------

class PdfPage:
    def __init__(self, page):
        self._page = page
        rect = page.rect
        self.width = float(rect.width)
        self.height = float(rect.height)

    def render(self, buffer: Image.Image, transform: AffineTransform):
        bw, bh = buffer.size
        # page region that lands inside the buffer
        region = transform.invert().map_rect(Rect(0.0, 0.0, float(bw), float(bh)))
        clip = fitz.Rect(*region.as_tuple()) & self._page.rect
        if clip.is_empty:
            return

        t = transform
        # fitz.Matrix(a, b, c, d, e, f): x' = a*x + c*y + e, y' = b*x + d*y + f
        matrix = fitz.Matrix(t.a, t.d, t.b, t.e, t.c, t.f)
        # opaque white paper inside the page, buffer stays transparent around it
        try:
            pix = self._page.get_pixmap(matrix=matrix, clip=clip, alpha=False)
            tile = Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
        except Exception as e:
            raise RasterizationError(f"PDF render failed: {e}") from e
        buffer.paste(tile, (pix.x, pix.y))


class PdfDocument:
    def __init__(self, doc):
        self._doc = doc

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def open_page(self, index: int) -> PdfPage:
        _check_index(index, self.page_count)
        try:
            return PdfPage(self._doc.load_page(index))
        except Exception as e:
            raise RasterizationError(f"Cannot open page {index}: {e}") from e

    def close(self):
        if self._doc is not None:
            self._doc.close()
            self._doc = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class PdfRasterizer:
    def open_document(self, handle) -> PdfDocument:
        src = _read_handle(handle)
        try:
            if isinstance(src, bytes):
                doc = fitz.open(stream=src, filetype="pdf")
            else:
                doc = fitz.open(src)
        except Exception as e:
            raise RasterizationError(f"Cannot open document: {e}") from e
        if doc.page_count < 1:
            doc.close()
            raise RasterizationError("Document has no pages")
        log.debug("opened PDF with %d page(s)", doc.page_count)
        return PdfDocument(doc)


# -----------------------------
# Raster images (Pillow)
# -----------------------------

class ImagePage:
    def __init__(self, image: Image.Image):
        self._image = image
        self.width = float(image.width)
        self.height = float(image.height)

    def render(self, buffer: Image.Image, transform: AffineTransform):
        inv = transform.invert()
        # Image.AFFINE wants the output->input mapping
        resample = Image.BILINEAR if transform.scale_x < 1.0 else Image.NEAREST
        try:
            warped = self._image.transform(buffer.size, Image.AFFINE, inv.coefficients(), resample=resample)
        except Exception as e:
            raise RasterizationError(f"Image render failed: {e}") from e
        buffer.alpha_composite(warped)


class ImageDocument:
    page_count = 1

    def __init__(self, image: Image.Image):
        self._image = image

    def open_page(self, index: int) -> ImagePage:
        _check_index(index, self.page_count)
        return ImagePage(self._image)

    def close(self):
        self._image = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class ImageRasterizer:
    def open_document(self, handle) -> ImageDocument:
        if isinstance(handle, Image.Image):
            return ImageDocument(handle.convert("RGBA"))
        src = _read_handle(handle)
        try:
            img = Image.open(io.BytesIO(src) if isinstance(src, bytes) else src)
            img.load()
        except Exception as e:
            raise RasterizationError(f"Cannot open image: {e}") from e
        return ImageDocument(img.convert("RGBA"))


def rasterizer_for(path) -> Union[PdfRasterizer, ImageRasterizer]:
    ext = os.path.splitext(os.fspath(path))[1].lower()
    if ext in IMAGE_EXTENSIONS:
        return ImageRasterizer()
    if ext in PDF_EXTENSIONS or not ext:
        return PdfRasterizer()
    raise RasterizationError(f"Unsupported file type: {ext}")
