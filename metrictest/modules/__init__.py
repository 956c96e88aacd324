"""Feature modules for metrictest."""
