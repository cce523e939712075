"""Build Tracker - track and compare the size of build artifacts over time.

This package provides the build records, the query collaborator used by the
HTTP API, the build comparator, and the dashboard state model.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
