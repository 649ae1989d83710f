"""Shared infrastructure: configuration, logging, exceptions."""
