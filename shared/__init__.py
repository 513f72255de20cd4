"""
Shared Kernel

This module contains base classes and utilities shared across all domain contexts.
Following DDD principles, this is the foundation for all domain models.
"""