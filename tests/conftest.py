"""
Shared fixtures for the page viewer tests.

Provides a manual `after()` loop, a recording rasterizer and a wired-up
engine + renderer pair. Nothing here needs a display.
"""
import sys
import os
import pytest

# Modules live at the repository root
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from PIL import Image

from errors import RasterizationError
from progressive import ProgressiveRenderer
from zoom_engine import ZoomEngine


# ── Manual event loop ───────────────────────────────────────────────────

class FakeLoop:
    """Stands in for a Tk widget's after()/after_cancel() timer API."""

    def __init__(self):
        self.now = 0
        self._seq = 0
        self._tasks = {}

    def after(self, ms, fn):
        self._seq += 1
        after_id = f"after#{self._seq}"
        self._tasks[after_id] = (self.now + int(ms), self._seq, fn)
        return after_id

    def after_cancel(self, after_id):
        self._tasks.pop(after_id, None)

    @property
    def pending(self):
        return len(self._tasks)

    def run_due(self):
        """Run everything due at the current time (including newly due work)."""
        ran = 0
        while True:
            due = [(t[0], t[1], k) for k, t in self._tasks.items() if t[0] <= self.now]
            if not due:
                return ran
            _, _, key = min(due)
            _, _, fn = self._tasks.pop(key)
            fn()
            ran += 1

    def run_next(self):
        """Run only the earliest queued task."""
        if not self._tasks:
            return False
        key = min(self._tasks, key=lambda k: self._tasks[k][:2])
        due, _, fn = self._tasks.pop(key)
        self.now = max(self.now, due)
        fn()
        return True

    def run_all(self, limit=1000):
        """Advance time task by task until the queue is empty."""
        ran = 0
        while self._tasks and ran < limit:
            key = min(self._tasks, key=lambda k: self._tasks[k][:2])
            due, _, fn = self._tasks.pop(key)
            self.now = max(self.now, due)
            fn()
            ran += 1
        return ran


# ── Recording rasterizer ────────────────────────────────────────────────

class RecordingPage:
    def __init__(self, owner, width, height):
        self.owner = owner
        self.width = float(width)
        self.height = float(height)

    def render(self, buffer, transform):
        self.owner.calls.append((buffer.size, transform.copy()))
        if self.owner.hook is not None:
            self.owner.hook()
        if self.owner.fail:
            # scribble first so a leaked buffer would be visible
            buffer.paste((255, 0, 0, 255), (0, 0) + buffer.size)
            raise RasterizationError("boom")
        shade = len(self.owner.calls) % 256
        buffer.paste((shade, 128, 255 - shade, 255), (0, 0) + buffer.size)


class RecordingDocument:
    page_count = 1

    def __init__(self, owner):
        self.owner = owner
        self.closed = False

    def open_page(self, index):
        if index != 0:
            raise RasterizationError(f"no page {index}")
        return RecordingPage(self.owner, self.owner.width, self.owner.height)

    def close(self):
        self.closed = True


class RecordingRasterizer:
    def __init__(self, width=1000, height=1600):
        self.width = width
        self.height = height
        self.calls = []
        self.fail = False
        self.hook = None
        self.opened = []

    def open_document(self, handle):
        if handle is None:
            raise RasterizationError("no handle")
        doc = RecordingDocument(self)
        self.opened.append(doc)
        return doc


# ── Fixtures ────────────────────────────────────────────────────────────

@pytest.fixture
def loop():
    return FakeLoop()


@pytest.fixture
def rasterizer():
    return RecordingRasterizer()


@pytest.fixture
def engine(loop):
    return ZoomEngine(loop)


@pytest.fixture
def renderer(engine, loop, rasterizer):
    displays = []
    r = ProgressiveRenderer(engine, loop, rasterizer=rasterizer,
                            on_display=lambda d: displays.append((d.bitmap, d.matrix.copy(), d.kind)))
    r.displays = displays
    return r


@pytest.fixture
def page_image():
    """200x100 RGBA image, left half red, right half blue."""
    img = Image.new("RGBA", (200, 100), (255, 0, 0, 255))
    img.paste((0, 0, 255, 255), (100, 0, 200, 100))
    return img
