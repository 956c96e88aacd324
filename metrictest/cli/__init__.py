"""Command-line interface for metrictest."""
