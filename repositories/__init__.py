"""
repositories/ - Data Access Layer
==================================
One repository per collection. Repositories turn records into documents
(through models/mapping.py) and back, and declare the collection's queries.
"""
