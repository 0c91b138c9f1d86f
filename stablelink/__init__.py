"""
StableLink Backend

Off-chain side of the StableLink InvoicePayments contract:
- Polling indexer for contract events on Etherlink
- Webhook fan-out to subscribed endpoints
- REST API for invoices, webhooks and withdrawals
"""

__version__ = "0.1.0"
