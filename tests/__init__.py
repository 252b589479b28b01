# FoodBank AI Tests Package

"""
Test suite for the FoodBank AI decision engine.

Run tests:
    pytest
"""
