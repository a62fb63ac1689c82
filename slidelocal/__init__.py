"""Local control of Slide curtain controllers."""

from .rpc import SlideClient

__all__ = ["SlideClient"]
