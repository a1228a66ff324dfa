"""
Utility helpers for the temporary directory manager.
"""
