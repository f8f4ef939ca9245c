"""
remitbot

Regex-based intent recognition and slot filling for remittance chat.
"""

__version__ = "1.0.0"
