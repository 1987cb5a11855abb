"""Pass Tracker package.

Feature modules (accounts, ledger, requests, approvals, ...) with a thin
Flask controller layer on top of service/repository layers.
"""
