"""
Backend package for the recipes API.

This package provides a FastAPI application serving recipe CRUD over
Firestore, plus the count/publish logic run by the Cloud Functions in
`main.py` and the recipe image storage helper.
"""
