"""TALØ admin backend: admin login and product catalogue API."""
