"""
Cashcast: recurring charge detection and cash-flow projections.
"""
