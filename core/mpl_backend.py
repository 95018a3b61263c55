from __future__ import annotations

import os
import tempfile

HEADLESS_BACKEND = "Agg"
CONFIG_DIR_NAME = "seqcompare_mplconfig"


def configure_headless_matplotlib() -> str:
    """Switch matplotlib to a raster/SVG-only backend and return its name.

    Comparison figures are drawn from Flask request threads and from the CLI
    on machines without a display; an interactive backend would fail in both.
    """

    if not os.environ.get("MPLCONFIGDIR", "").strip():
        os.environ["MPLCONFIGDIR"] = os.path.join(tempfile.gettempdir(), CONFIG_DIR_NAME)
    if not os.environ.get("MPLBACKEND", "").strip():
        os.environ["MPLBACKEND"] = HEADLESS_BACKEND

    import matplotlib

    backend = str(matplotlib.get_backend())
    if "agg" not in backend.lower():
        matplotlib.use(HEADLESS_BACKEND, force=True)
        backend = str(matplotlib.get_backend())
    return backend
