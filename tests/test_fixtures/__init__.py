"""Shared fakes and record factories for the test suite."""
