"""
Matching Logic Module

Profile building, oracle-backed scoring, ranking and presentation filters
for the opportunity catalog.
"""
