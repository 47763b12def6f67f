from ._utils import hmac, sha256, verify

__all__ = ["hmac", "verify", "sha256"]
