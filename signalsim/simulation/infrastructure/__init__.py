"""
Infrastructure module initialization.
"""
