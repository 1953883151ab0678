"""
LingoTrack practice tracking backend.

Two trackers used around exercise generation in a language-learning app:
1. Daily practice streaks per user and language
2. Session and cross-session word repetition avoidance
"""

__version__ = "0.1.0"
