"""SITEPLAN HTTP API."""
