"""
db/ - Database Layer
====================
Owns the MongoDB client, collection/index setup and the transaction manager.
This layer is the lowest in the architecture and has no dependencies on other layers.
"""
