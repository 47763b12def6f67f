from . import attacks, codec, crypto_constructor, errors, hashing, oracles, scheme, utils

__all__ = ["attacks", "codec", "crypto_constructor", "errors", "hashing", "oracles", "scheme", "utils"]
