"""Constraint solvers for the interactive crop gestures.

Each solver is a pure function of the poses captured at drag start and the
current pointer position; the session owns the drag context in between.
"""
