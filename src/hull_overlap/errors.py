"""Exceptions raised by the hull overlap engine."""


class HullOverlapError(Exception):
    """Base exception for hull overlap errors."""
    pass


class ConfigurationError(HullOverlapError, ValueError):
    """Unknown hull method or out-of-range hull parameter."""
    pass


class DegenerateGeometryError(HullOverlapError, ValueError):
    """Input geometry cannot define a projection plane or a 2D frame."""
    pass
