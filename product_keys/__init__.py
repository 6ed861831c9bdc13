"""
Product keys module - human-readable activation codes.

This module handles:
- Product key generation in XXXX-XXXX-XXXX-XXXX format
- Format validation and normalization of user input
"""
