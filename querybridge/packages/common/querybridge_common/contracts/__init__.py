from .base import _Base

__all__ = ["_Base"]
