"""
Product family shared by coils and orders.
"""

from enum import Enum


class ProductFamily(str, Enum):
    """Raw-material product families."""
    HR = "HR"  # Hot-rolled
    CR = "CR"  # Cold-rolled
    GP = "GP"  # Galvanized plain
    CC = "CC"  # Colour coated
    SS = "SS"  # Stainless
