"""Monteur - build a Java project from a source archive and publish its artifact."""

__version__ = "0.1.0"
