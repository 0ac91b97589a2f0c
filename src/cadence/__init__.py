"""
Cadence - schedulers over real and virtual time.

Re-exports everything from ``cadence.core``.
"""

__version__ = "0.1.0"

from cadence.core import *  # noqa
