from __future__ import annotations

import os

# Widget tests run headless.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
