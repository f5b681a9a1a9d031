"""
Key-value store systems the load tester can run against.
"""
