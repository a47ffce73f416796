# ui_controls.py
import tkinter as tk
from tkinter import ttk

import config


def build_ui(app):
    app.columnconfigure(0, weight=1)
    app.rowconfigure(0, weight=1)

    main = ttk.Frame(app, padding=8)
    main.grid(row=0, column=0, sticky="nsew")
    main.rowconfigure(1, weight=1)
    main.columnconfigure(0, weight=1)

    # Top bar: file buttons, zoom slider, fit
    topbar = ttk.Frame(main)
    topbar.grid(row=0, column=0, sticky="ew")
    topbar.columnconfigure(3, weight=1)

    ttk.Button(topbar, text="Open…", command=app.open_document).grid(row=0, column=0, sticky="w", padx=(0, 4))
    ttk.Button(topbar, text="Export View…", command=app.export_view).grid(row=0, column=1, sticky="w", padx=(4, 12))

    app.zoom_var = tk.DoubleVar(value=1.0)
    ttk.Label(topbar, text="Zoom").grid(row=0, column=2, sticky="w")
    ttk.Scale(
        topbar,
        from_=config.MIN_ZOOM,
        to=config.MAX_ZOOM,
        variable=app.zoom_var,
        command=lambda _e: app._on_zoom_slider(),
    ).grid(row=0, column=3, sticky="ew", padx=8)
    ttk.Button(topbar, text="Fit", command=app.zoom_fit).grid(row=0, column=4, sticky="e")
    ttk.Button(topbar, text="Controls", command=app.show_controls).grid(row=0, column=5, sticky="e", padx=(4, 0))

    # Viewport
    app.viewport = app._create_viewport(main)
    app.viewport.grid(row=1, column=0, sticky="nsew", pady=(8, 0))

    # Status line
    app.info_var = tk.StringVar(value="Open a PDF or image to begin.")
    ttk.Label(main, textvariable=app.info_var, anchor="w").grid(row=2, column=0, sticky="ew", pady=(6, 0))
