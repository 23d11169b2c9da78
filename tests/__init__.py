# Authenticator Test Suite
"""
Test suite including:
- Unit tests for the codec, comparator, deriver and verifier
- Security tests (wrong codes, malformed input, randomness failures)
- Integration tests (audit trail, logging, provisioning)

Run with: pytest
"""
