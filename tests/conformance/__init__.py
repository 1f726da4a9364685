"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the ProtoCoin ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. conservation.py - Sum of balances equals total supply
2. atomicity.py - Rejected operations change nothing
3. determinism.py - Replay reproduces identical state
4. temporal.py - Clock ordering and mint cooldown

These tests use hypothesis for property-based testing.
"""
