"""Workdeck Resource Planner — team capacity dashboard on top of the Workdeck API."""

__version__ = "1.0.0"
