"""
Email service for centralized email sending.

This module provides the EmailService class for sending emails with:
- Django template rendering for HTML and plain text
- Raw content emails
- The configured Django mail backend as transport

Related files:
    - authentication/tasks.py: Celery tasks sending auth emails through here
    - authentication/templates/authentication/emails/: Email templates

Configuration:
    Email settings are read from Django settings:
    - EMAIL_BACKEND
    - EMAIL_HOST, EMAIL_PORT
    - DEFAULT_FROM_EMAIL
    - EMAIL_BRAND_NAME (exposed to templates as ``brand_name``)

Usage:
    from toolkit.services.email import EmailService

    # Send email with template
    EmailService.send(
        to="user@example.com",
        subject="Verify your email",
        template_name="authentication/emails/verification",
        context={"verification_url": url},
    )

Note:
    Transport errors propagate to the caller. Callers running in Celery
    rely on that to retry.
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template import TemplateDoesNotExist
from django.template.loader import render_to_string
from django.utils.html import strip_tags

from toolkit.helpers import mask_email

logger = logging.getLogger(__name__)


class EmailService:
    """
    Centralized email sending with template support.

    Usage:
        # Send template email
        EmailService.send(
            to="user@example.com",
            subject="Welcome!",
            template_name="welcome",
            context={"user_name": "John"}
        )

        # Send raw email
        EmailService.send_raw(
            to="user@example.com",
            subject="Quick note",
            body_text="Plain text content",
            body_html="<p>HTML content</p>"
        )
    """

    @staticmethod
    def send(
        to: str | list[str],
        subject: str,
        template_name: str,
        context: dict,
        from_email: str | None = None,
        reply_to: str | None = None,
    ) -> bool:
        """
        Send email using a template.

        Args:
            to: Recipient email address(es)
            subject: Email subject line
            template_name: Name of template (without extension)
                           Looks for: {template_name}.html and {template_name}.txt
            context: Template context variables
            from_email: Sender email (defaults to DEFAULT_FROM_EMAIL)
            reply_to: Reply-to address

        Returns:
            True if email was sent successfully

        Raises:
            TemplateDoesNotExist: If neither template exists
        """
        context = {"brand_name": settings.EMAIL_BRAND_NAME, **context}

        try:
            html_content = render_to_string(f"{template_name}.html", context)
        except TemplateDoesNotExist:
            html_content = None

        try:
            text_content = render_to_string(f"{template_name}.txt", context)
        except TemplateDoesNotExist:
            if html_content is None:
                raise
            # Fallback: strip HTML tags from HTML content
            text_content = strip_tags(html_content)

        return EmailService.send_raw(
            to=to,
            subject=subject,
            body_text=text_content,
            body_html=html_content,
            from_email=from_email,
            reply_to=reply_to,
        )

    @staticmethod
    def send_raw(
        to: str | list[str],
        subject: str,
        body_text: str,
        body_html: str | None = None,
        from_email: str | None = None,
        reply_to: str | None = None,
    ) -> bool:
        """
        Send email with raw content (no template).

        Args:
            to: Recipient email address(es)
            subject: Email subject line
            body_text: Plain text email body
            body_html: HTML email body (optional)
            from_email: Sender email (defaults to DEFAULT_FROM_EMAIL)
            reply_to: Reply-to address

        Returns:
            True if the backend accepted the message
        """
        if isinstance(to, str):
            to = [to]

        email = EmailMultiAlternatives(
            subject=subject,
            body=body_text,
            from_email=from_email or settings.DEFAULT_FROM_EMAIL,
            to=to,
            reply_to=[reply_to] if reply_to else None,
        )
        if body_html:
            email.attach_alternative(body_html, "text/html")

        sent = email.send(fail_silently=False)
        recipients = ", ".join(mask_email(address) for address in to)
        logger.info(f"Email sent to {recipients}: {subject}")
        return sent > 0
