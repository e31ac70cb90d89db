"""
Stair-Up: stair-climbing training client service.
"""

__version__ = "1.0.0"
