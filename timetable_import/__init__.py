"""
Import course schedules from university systems (REST API, rendered HTML,
WakeUp share blobs) into one canonical set of courses, time slots and config.
"""

__version__ = "0.1.0"
