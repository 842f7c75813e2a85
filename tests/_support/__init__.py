"""Test doubles shared across the recordspine test suite."""
