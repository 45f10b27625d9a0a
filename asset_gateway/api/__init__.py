"""
HTTP layer: the asset proxy route and its dependencies.
"""
