"""
Tests package - test suite for the Spinnaker Operator e2e harness.

Contains:
- unit/: Unit tests against an in-memory recording gateway
- integration/: End-to-end tests against a real Kubernetes cluster
"""
