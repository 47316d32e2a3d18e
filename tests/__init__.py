"""
Test suite untuk Security Audit API.
"""
