"""
Command-line client for the contacts API.
"""
