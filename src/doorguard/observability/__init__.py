"""Observability helpers for the guard process.

logging_config: structlog configuration
memory: process memory metrics reported by the /memory command
"""
