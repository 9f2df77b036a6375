"""
Observability module for the progress engine.

This module provides:
- Metrics collection with Prometheus
"""

__all__ = ["metrics"]
