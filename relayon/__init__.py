"""relayon - In-process event dispatch for Python.

This package provides a listener registry with wildcard pattern dispatch,
under concurrent, sequential and synchronous execution disciplines.
"""

__version__ = "0.1.0"

from loguru import logger

# Disable all relayon logging by default.  Users opt in with:
#     from loguru import logger
#     logger.enable("relayon")
logger.disable("relayon")

from relayon.base_emitter import BaseEmitter, DispatchPlan
from relayon.emitter import Emitter
from relayon.exceptions import OptionsError, RelayonError
from relayon.options import EmitterOptions
from relayon.registry import ListenerRegistry

# Module-level default emitter instance
default_emitter = Emitter()

__all__ = [
    # Version
    "__version__",
    # Emitter classes
    "BaseEmitter",
    "Emitter",
    "DispatchPlan",
    "ListenerRegistry",
    "default_emitter",
    # Configuration
    "EmitterOptions",
    # Exception classes
    "RelayonError",
    "OptionsError",
]
