"""Object store and artifact layer.

This package holds the in-memory object store, the value codec and
the artifact serializer and deserializer built on top of it.
"""
