"""Dashboard module.

This module handles:
- Artifact filtering and URL-driven selection
- Color encoding of comparison cells
- The dashboard state model and its API client
"""

from build_tracker.dashboard.state import DashboardConfig, DashboardState

__all__ = ["DashboardConfig", "DashboardState"]
