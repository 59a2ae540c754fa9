"""SITEPLAN - site regulation and buildable geometry engine for modular buildings."""

__version__ = "0.1.0"
