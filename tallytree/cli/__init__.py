"""
Command-line interface for Tallytree.
"""
