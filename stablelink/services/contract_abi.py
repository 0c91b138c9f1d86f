"""
Event fragment of the InvoicePayments contract ABI.

Only the events the indexer subscribes to are listed.
"""

INVOICE_PAYMENTS_EVENTS_ABI = [
    {
        "anonymous": False,
        "name": "InvoiceCreated",
        "type": "event",
        "inputs": [
            {"indexed": True, "internalType": "uint256", "name": "invoiceId", "type": "uint256"},
            {"indexed": True, "internalType": "address", "name": "creator", "type": "address"},
            {"indexed": False, "internalType": "address", "name": "token", "type": "address"},
            {"indexed": False, "internalType": "uint256", "name": "amount", "type": "uint256"},
        ],
    },
    {
        "anonymous": False,
        "name": "InvoicePaid",
        "type": "event",
        "inputs": [
            {"indexed": True, "internalType": "uint256", "name": "invoiceId", "type": "uint256"},
            {"indexed": True, "internalType": "address", "name": "payer", "type": "address"},
            {"indexed": False, "internalType": "uint256", "name": "amount", "type": "uint256"},
        ],
    },
    {
        "anonymous": False,
        "name": "InvoiceCancelled",
        "type": "event",
        "inputs": [
            {"indexed": True, "internalType": "uint256", "name": "invoiceId", "type": "uint256"},
        ],
    },
    {
        "anonymous": False,
        "name": "Withdrawal",
        "type": "event",
        "inputs": [
            {"indexed": True, "internalType": "address", "name": "user", "type": "address"},
            {"indexed": True, "internalType": "address", "name": "token", "type": "address"},
            {"indexed": False, "internalType": "uint256", "name": "amount", "type": "uint256"},
        ],
    },
]
