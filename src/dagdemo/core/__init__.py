"""Core infrastructure: configuration, logging and the block DAG model."""
