# storefront/schemas/__init__.py
"""
Schema module initialization.
Exports all schema classes from submodules for convenient imports.
"""
from .account import *
from .catalog import *
from .product import *
