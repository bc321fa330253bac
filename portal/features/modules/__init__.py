"""
Module instances placed on portal pages, their settings and permissions.
"""
