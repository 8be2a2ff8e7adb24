"""
Services package for reports and receipts.
"""
from visa_fees.services.receipt_service import ReceiptCounter

__all__ = ['ReceiptCounter']
