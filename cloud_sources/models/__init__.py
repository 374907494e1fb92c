"""Models used by Cloud Sources."""
