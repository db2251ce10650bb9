"""
Test suites package.

Kept importable so unit tests can share ``testsuites.unit.fakes`` and IDEs
can navigate between tests and fixtures.
"""
