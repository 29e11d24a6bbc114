"""Monotone - miscellaneous tutorials, served."""
