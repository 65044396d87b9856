"""
repositories/ - Data Access Layer
==================================
Formats calls to the engine's stored functions and decodes their results.
"""

from repositories.query_gateway import QueryGateway

__all__ = ["QueryGateway"]
