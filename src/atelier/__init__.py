"""Atelier - decentralized skill-based task allocation between a coordinator and robots."""

__version__ = "0.1.0"
