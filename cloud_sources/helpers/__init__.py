"""Various helpers and utilities for Cloud Sources."""
