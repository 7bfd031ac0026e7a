"""
Helpers for testing code built on lookuparrays. ``lookuparrays.testing.strategies`` requires
hypothesis.
"""
