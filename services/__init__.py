# services/__init__.py

# This file makes the 'services' directory a Python package and
# exposes its modules for import.

from . import catalog_view
from . import product_form
from . import view_router
