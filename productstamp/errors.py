from __future__ import annotations


class ProductStampError(RuntimeError):
    """Base class for pipeline failures."""


class DecodeFailure(ProductStampError):
    """Subject or logo bytes could not be decoded into an image."""


class SurfaceAcquisitionFailure(ProductStampError):
    """The output surface could not be allocated."""


class EncodeFailure(ProductStampError):
    """The finished surface could not be serialized."""


class CutoutFailure(ProductStampError):
    """Background removal rejected the input or timed out."""
