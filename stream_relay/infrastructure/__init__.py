"""Infrastructure layer: queue backends and metrics."""
