"""
Core asset logic.

Framework-agnostic: nothing here imports FastAPI or boto3, so key
derivation and content-type rules can be tested in isolation.
"""
