"""
Visnet E-Learning API.

Course catalog, enrollment, progress tracking and admin moderation
over a relational store.
"""

__version__ = "1.0.0"
