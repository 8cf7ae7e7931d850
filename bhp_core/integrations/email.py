# bhp_core/integrations/email.py
from __future__ import annotations

import logging
from typing import Iterable, Union

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.utils.html import strip_tags

from bhp_core.common.result import Outcome

logger = logging.getLogger(__name__)


def send_email(to: Union[str, Iterable[str]], subject: str, html: str) -> Outcome[int]:
    """
    Send an HTML email with a plain-text alternative.

    Best-effort: SMTP failures are logged and returned, never raised.
    """
    recipients = [to] if isinstance(to, str) else [r for r in to if r]
    if not recipients:
        return Outcome.failure(ValueError("No recipients"))

    message = EmailMultiAlternatives(
        subject=subject,
        body=strip_tags(html),
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=recipients,
    )
    message.attach_alternative(html, "text/html")

    try:
        sent = message.send(fail_silently=False)
    except Exception as exc:  # smtplib / socket errors vary by backend
        logger.exception("Failed to send email %r to %s", subject, ", ".join(recipients))
        return Outcome.failure(exc)

    logger.info("Sent email %r to %d recipient(s)", subject, len(recipients))
    return Outcome.success(sent)
