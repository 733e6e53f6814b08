"""Core match lifecycle engine.

Responsibilities:
  - Provide the transition validator and the confirmation consensus resolver.
  - Must not touch storage; operates on immutable Match values.
"""
