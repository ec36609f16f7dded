"""Somni Application Package — sleep tracking and wake-window scheduling.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
