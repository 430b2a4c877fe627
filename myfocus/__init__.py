"""
MyFocus backend: subscription payments and habit progression.
"""

__version__ = "1.0.0"
