from ._base import Verdict
from .padding import SchemeOracle, scheme_verdict
from .process import ProcessOracle
from .gate import GatedOracle

__all__ = ["Verdict", "SchemeOracle", "scheme_verdict", "ProcessOracle", "GatedOracle"]
