"""
MFA Compliance Validator
========================
Read-only assessment of a GitHub organization's multi-factor authentication
posture against HITRUST, FedRAMP, and HIPAA controls. Produces one JSON
compliance report without modifying the organization.
"""

__version__ = "1.0.0"
__mode__ = "READ-ONLY"
