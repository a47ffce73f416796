# actions.py
import logging
import os
from tkinter import filedialog, messagebox

from errors import ViewerError
from rasterizers import IMAGE_EXTENSIONS

log = logging.getLogger(__name__)


def open_document(app, path=None):
    if path is None:
        images = " ".join("*" + ext for ext in sorted(IMAGE_EXTENSIONS))
        path = filedialog.askopenfilename(
            title="Open document",
            filetypes=[("PDF document", "*.pdf"), ("Images", images), ("All files", "*.*")],
        )
    if not path:
        return False

    try:
        app.viewport.set_file(path)
    except (ViewerError, OSError) as e:
        log.warning("open failed for %s: %s", path, e)
        messagebox.showerror("Open failed", f"{os.path.basename(path)}:\n{e}")
        return False

    app.current_path = path
    app.zoom_var.set(app.viewport.get_zoom())
    app.set_status()
    return True


def export_view(app):
    bitmap = app.viewport.current_bitmap()
    if bitmap is None:
        messagebox.showinfo("Nothing to export", "Open a document first.")
        return

    base = os.path.splitext(os.path.basename(app.current_path or "page"))[0]
    out_path = filedialog.asksaveasfilename(
        title="Export current render",
        defaultextension=".png",
        initialfile=f"{base}_{app.viewport.displayed_kind() or 'view'}.png",
        filetypes=[("PNG image", "*.png")],
    )
    if not out_path:
        return

    try:
        bitmap.save(out_path, "PNG")
    except OSError as e:
        messagebox.showerror("Export failed", str(e))
        return

    app.set_status(extra=" | Exported")
