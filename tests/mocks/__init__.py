"""
Mock collaborators for MyFocus tests.
"""

from .gateway import MockPaymentGateway

__all__ = ["MockPaymentGateway"]
