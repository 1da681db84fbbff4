"""
Domain Layer

Pure business rules for the file lifecycle. No Flask, Redis or Celery imports.
"""
