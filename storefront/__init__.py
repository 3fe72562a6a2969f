"""Farm storefront core: catalog, cart, checkout and order submission."""

__version__ = "1.0.0"
