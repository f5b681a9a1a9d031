"""
Persistence of load test results.
"""
