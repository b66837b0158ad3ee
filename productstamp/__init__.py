from productstamp.models import (
    CompositeOptions,
    CompositeResult,
    CornerPosition,
    CustomPosition,
    Fidelity,
    RenderSettings,
)
from productstamp.pipeline import composite, composite_sync, render_composite

__version__ = "0.1.0"

__all__ = [
    "CompositeOptions",
    "CompositeResult",
    "CornerPosition",
    "CustomPosition",
    "Fidelity",
    "RenderSettings",
    "composite",
    "composite_sync",
    "render_composite",
]
