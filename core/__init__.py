"""
Core module for shared domain infrastructure.

This module contains:
- Domain exceptions and value objects
- Timestamp and password/token helpers
- Licensing settings access and metrics
- Operator management commands
"""
