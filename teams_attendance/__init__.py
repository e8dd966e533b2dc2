"""Attendance reports from videoconference meeting exports."""

__version__ = "1.0.0"
