"""Constant tables shared across diffrisk modules."""
