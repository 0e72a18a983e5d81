"""
Observability module for learnquest.

This module provides:
- Metrics collection with Prometheus
"""

__all__ = ["metrics"]
