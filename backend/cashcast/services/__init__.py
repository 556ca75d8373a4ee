"""
Business logic services package.
"""
