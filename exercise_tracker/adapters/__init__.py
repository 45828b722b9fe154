"""Adapters layer for the Exercise Tracker service.

This layer contains all adapters that translate between the core domain
and external systems (databases, metrics backends).
"""
