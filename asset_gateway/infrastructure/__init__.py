"""
Infrastructure layer - external service integrations.

- storage: Object storage (R2) and its in-memory stand-in
"""
