# input_controller.py
import config


class InputController:
    """
    Dumb input layer:
      - Left-drag pans, mouse wheel zooms around the pointer
      - +/- zoom around the view center, 0 fits the page
      - Keeps app.zoom_var in sync with viewport.get_zoom()

    No math here. All pan/zoom behavior is in the zoom engine.
    """

    def __init__(self, app, viewport):
        self.app = app
        self.viewport = viewport
        self.canvas = viewport.canvas

    def install(self):
        # Mouse drag panning
        self.canvas.bind("<ButtonPress-1>", self._on_pan_press)
        self.canvas.bind("<B1-Motion>", self._on_pan_move)
        self.canvas.bind("<ButtonRelease-1>", self._on_pan_release)

        # Wheel zoom
        self.canvas.bind("<MouseWheel>", self._on_mousewheel_zoom)  # Windows/macOS
        self.canvas.bind("<Button-4>", self._on_linux_wheel_up)     # Linux
        self.canvas.bind("<Button-5>", self._on_linux_wheel_down)   # Linux

        # Keyboard zoom
        self.canvas.bind("<KeyPress-plus>", lambda e: self._key_zoom(config.KEY_ZOOM_STEP))
        self.canvas.bind("<KeyPress-equal>", lambda e: self._key_zoom(config.KEY_ZOOM_STEP))
        self.canvas.bind("<KeyPress-minus>", lambda e: self._key_zoom(1.0 / config.KEY_ZOOM_STEP))
        self.canvas.bind("<KeyPress-0>", lambda e: self._key_fit())

        # Make sure canvas can receive events
        self.canvas.bind("<Enter>", lambda e: self.canvas.focus_set())
        self.canvas.bind("<Button-1>", lambda e: self.canvas.focus_set(), add=True)

    # -----------------------------
    # Panning
    # -----------------------------
    def _on_pan_press(self, e):
        self.canvas.configure(cursor="fleur")
        self.viewport.pan_begin(e.x, e.y)

    def _on_pan_move(self, e):
        self.viewport.pan_move(e.x, e.y)

    def _on_pan_release(self, _e):
        self.canvas.configure(cursor="")
        self.viewport.pan_end()

    # -----------------------------
    # Zoom
    # -----------------------------
    def _sync_zoom(self):
        self.app.zoom_var.set(self.viewport.get_zoom())

    def _on_linux_wheel_up(self, e):
        self.viewport.wheel_zoom(e.x, e.y, delta=+1)
        self._sync_zoom()

    def _on_linux_wheel_down(self, e):
        self.viewport.wheel_zoom(e.x, e.y, delta=-1)
        self._sync_zoom()

    def _on_mousewheel_zoom(self, e):
        # e.delta is typically +/-120 on Windows, small on macOS trackpads
        self.viewport.wheel_zoom(e.x, e.y, delta=e.delta)
        self._sync_zoom()

    def _key_zoom(self, factor: float):
        self.viewport.engine.zoom_by(factor)
        self._sync_zoom()
        return "break"

    def _key_fit(self):
        self.viewport.zoom_fit()
        self._sync_zoom()
        return "break"
