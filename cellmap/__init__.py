"""Public :mod:`cellmap` API."""

from . import constants as _constants
from . import transpiler as _transpiler
from .constants import *  # noqa: F401,F403
from .transpiler import *  # noqa: F401,F403

__version__ = "0.1.0"

__all__ = ["__version__"]
__all__ += getattr(_constants, "__all__", [])
__all__ += getattr(_transpiler, "__all__", [])
