"""
sigscope: dependency graph and update-cascade inspector for reactive
signal runtimes.

Feed instrumentation events into an InspectorEngine and query the live
dependency graph, per-node metrics, focused views and the cascade
timeline.
"""

from .config import EngineConfig, load_config
from .engine import InspectorEngine

__version__ = "0.3.0"

__all__ = ["EngineConfig", "InspectorEngine", "load_config", "__version__"]
