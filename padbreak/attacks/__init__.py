from . import padding

__all__ = ["padding"]
