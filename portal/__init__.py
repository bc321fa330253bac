"""
Portal content viewer application package.
"""
