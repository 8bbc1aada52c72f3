"""
Personal file-storage backend.

This package provides a FastAPI application that stores file and folder
metadata in MongoDB, keeps session tokens in Redis and writes uploaded
payloads to a local storage directory.
"""
