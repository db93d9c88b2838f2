"""
Security Compliance Dashboard.

Audits the repositories of the authenticated GitHub account against a fixed
set of security-hygiene checks and renders an HTML summary report.
"""

__version__ = "1.0.0"
__author__ = "Platform Engineering"
