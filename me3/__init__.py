"""Mod profiles, dependency ordering, asset override lookup and a Steam game launcher front end."""

__version__ = "0.3.0"