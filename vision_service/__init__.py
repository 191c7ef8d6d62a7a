"""
Vision Service - health-checked service scaffold with start/stop control.
"""
__version__ = "1.0.0"
