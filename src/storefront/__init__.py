"""
Storefront Runtime
Declarative page composition: documents, styles, bindings, actions and rendering
"""

__version__ = "0.1.0"
