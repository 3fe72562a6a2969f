"""HTTP surface of the storefront."""
