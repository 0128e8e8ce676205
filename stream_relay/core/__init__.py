"""Core layer: configuration, logging, exceptions, interfaces, resilience."""
