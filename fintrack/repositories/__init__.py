"""
Data access layer.

Each store has a protocol class, an SQLAlchemy implementation used by the
app and an in-memory implementation used by service-level tests.
"""
