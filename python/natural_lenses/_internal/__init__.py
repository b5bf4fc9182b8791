"""
Library internals: the Maybe convention, container adapters and the optics.
"""

# Importing these registers their container adapters.
from . import ndarray as _ndarray  # noqa: F401
from . import nfocal as _nfocal  # noqa: F401
