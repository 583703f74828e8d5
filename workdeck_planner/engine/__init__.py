"""Workdeck Planner engine: config, errors, logging and token storage."""
