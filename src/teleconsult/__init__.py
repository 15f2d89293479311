"""
Teleconsult Access: OTP-gated access to teleconsultation links

Verifies a patient's mobile number against the appointment encoded in a
consultation link, delivers a one-time password by SMS, and issues a
short-lived access token bound to that link.
"""

__version__ = "0.1.0"
__author__ = "Teleconsult Team"
__description__ = "OTP-gated access to teleconsultation links"
