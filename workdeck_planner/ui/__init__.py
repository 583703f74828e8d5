"""Workdeck Planner UI — Reflex state and page for the resource planner."""
