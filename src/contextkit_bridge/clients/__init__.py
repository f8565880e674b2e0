from .contextkit import ContextKitClient

__all__ = ["ContextKitClient"]
