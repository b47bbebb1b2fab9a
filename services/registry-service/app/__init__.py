"""
Blood Bank Registry Service

Record-keeping API for a blood bank: blood types, hospitals, donors,
recipients and the donation/request transactions between them. Each kind
is listed and created through its own REST endpoint and kept in its own
collection.

Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "High Five"
__description__ = "Record-keeping service for blood bank registrations and transactions"
