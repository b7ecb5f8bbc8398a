"""Shared constants for the espresso simulation service."""

SERVICE_NAME = "espresso-sim"
CORRELATION_HEADER = "X-Correlation-Id"
