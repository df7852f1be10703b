"""PolyPin Playground: click-to-place polygon pins with a pulsing active pin."""
from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
