"""
profsweep - Cargo release-profile sweeps.

Build with every knob flipped, time it, rank the results.
"""

from profsweep.plan import build_plan
from profsweep.report import build_report
from profsweep.state import load_state, save_state

__version__ = "0.1.0"
__all__ = ["build_plan", "build_report", "load_state", "save_state", "__version__"]
