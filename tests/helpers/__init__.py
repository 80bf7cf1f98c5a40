"""Shared fakes and builders for the relay test suite."""
