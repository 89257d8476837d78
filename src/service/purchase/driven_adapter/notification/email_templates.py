"""Plain-text bodies of the transaction e-mails, keyed by template name."""

EMAIL_TEMPLATES: dict[str, str] = {
    'transaction-accepted': """
Hi {user_name},

Your payment for {event_title} has been verified and your ticket is confirmed.

Transaction ID: #{transaction_id}
Date: {transaction_date}
Total: IDR {total_idr}

See your tickets at {dashboard_link}
""",
    'transaction-rejected': """
Hi {user_name},

Your transaction #{transaction_id} for {event_title} (IDR {total_idr}, {transaction_date})
was rejected.

Reason: {reason}

You can try again at {retry_link} or review your purchases at {dashboard_link}
""",
}


def render_template(template_name: str, context: dict) -> str:
    """
    Raises:
        KeyError: When the template or one of its placeholders is missing
    """
    return EMAIL_TEMPLATES[template_name].format(**context).strip()
