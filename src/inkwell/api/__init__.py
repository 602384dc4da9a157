"""HTTP surface of the Inkwell API."""
