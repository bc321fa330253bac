"""
Content-definition subsystem: data types, content types, content items and
content templates, plus the in-memory content tree they load into.
"""
