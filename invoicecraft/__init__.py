"""
InvoiceCraft - Ledger Engine

A local-first invoice ledger for a single user: clients, products and
invoices kept on the user's own device, with no server.

DESIGN PRINCIPLES:
1. Every mutation goes through a named ledger operation
2. Derived values (totals, status) are computed, never typed in
3. Persistence is write-through after every mutating action
4. Imports are all-or-nothing
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "InvoiceCraft Team"
