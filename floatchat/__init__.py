"""FloatChat dashboard: query rendering and view synchronization for the ARGO explorer."""

__version__ = "1.0.0"
