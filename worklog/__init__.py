"""
worklog

Tracks work sessions and breaks from keyboard and mouse activity and keeps
a per-day attendance log that can be reviewed and edited afterwards.
"""

__version__ = "1.0.0"
__author__ = "worklog Team"
