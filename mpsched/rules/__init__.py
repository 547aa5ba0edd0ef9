"""
Rules module: built-in rule catalogs.
"""

from mpsched.rules.sum_product import sum_product_rules
from mpsched.rules.variational import variational_rules

__all__ = [
    "sum_product_rules",
    "variational_rules",
]
