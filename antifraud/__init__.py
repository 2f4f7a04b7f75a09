"""Card Anti-Fraud Service.

This service screens card-payment transactions and lets reviewers:
- Submit transactions for an ALLOWED / MANUAL_PROCESSING / PROHIBITED verdict
- Correct verdicts with feedback that retrains per-card thresholds
- Browse transaction history per card
- Maintain the stolen-card and suspicious-IP registries
"""

__version__ = "0.1.0"
