"""
db/ - Database Layer
====================
Resolves database providers, opens scoped connections and runs transactions.
This layer is the lowest in the architecture and has no dependencies on other layers.
"""
