"""
API server: REST endpoints for the donation ledger.
"""
