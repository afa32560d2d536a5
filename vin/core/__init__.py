"""
Core module for the VIN ID generator.
"""
