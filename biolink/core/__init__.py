"""Core layer: configuration, logging, exceptions and protocols."""
