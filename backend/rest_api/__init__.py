"""
REST API for the restaurant floor: orders, tables and bills.
"""
