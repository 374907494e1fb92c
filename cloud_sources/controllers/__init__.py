"""Controllers of a Cloud Sources session."""
