"""Driving School package.

Organized by feature modules (lessons, packages, payments, ledger, scheduling, ...)
with a thin Flask controller layer over service/repository layers.
"""
