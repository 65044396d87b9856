"""
models/ - Value objects for statements and result tables.
"""
