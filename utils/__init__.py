"""
utils/ - Logging and value-decoding helpers.
"""
