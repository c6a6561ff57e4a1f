"""Adapters – Redis state store and FastAPI transport."""
