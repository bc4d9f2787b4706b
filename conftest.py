"""
Pytest root marker; puts the project root on sys.path for the tests.
"""
