"""
models/ - Domain Layer
======================
Immutable records (Location, Student, Hobby, SimpleStudent) and the explicit
tables that map them to MongoDB documents.
"""
