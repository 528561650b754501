"""
db/ - Database Layer
====================
Handles PostgreSQL connections, schema initialization, transactions and
the translation of driver errors into the persistence error taxonomy.
This layer is the lowest in the architecture and has no dependencies on other layers.
"""
