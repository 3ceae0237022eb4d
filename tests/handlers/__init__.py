"""Example action targets used by the test suite."""
