"""
Licensing Engine Django project.

Hosts the settings and operator management commands for the license
issuance and validation engine.
"""
