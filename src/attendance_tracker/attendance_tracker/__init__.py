"""Attendance Tracker package.

Feature modules (subjects, timetable, attendance, stats, goals, ...) with thin
Flask controllers on top of service and repository layers.
"""
