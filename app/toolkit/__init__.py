"""
Toolkit - outbound email and PII helpers.

Key components:
    - services/email.py: EmailService, template rendering over the Django
      mail backend
    - helpers.py: mask_email for log lines that mention an address

Usage:
    from toolkit.services.email import EmailService
    from toolkit.helpers import mask_email

Note:
    - This app has no models.
    - For generic infrastructure (tokens, client IP, error envelope), see core/
"""
