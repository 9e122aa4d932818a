"""Jinja2 templates for reminder e-mails.

Each message has an HTML body and a plain-text alternative.
"""

from datetime import datetime
from typing import Any

from jinja2 import BaseLoader, Environment, StrictUndefined, TemplateError

from ..exceptions import NotificationError

_STYLE = """
    body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px; }
    .header { color: white; padding: 20px; text-align: center; border-radius: 8px 8px 0 0; }
    .content { background-color: #f9fafb; padding: 30px; border: 1px solid #e5e7eb; border-radius: 0 0 8px 8px; }
    .book { background-color: white; padding: 15px; margin: 15px 0; border-radius: 8px; }
    .label { font-weight: bold; color: #6b7280; }
    .badge { background-color: #DC2626; color: white; padding: 4px 8px; border-radius: 4px; font-weight: bold; font-size: 12px; }
    .footer { text-align: center; margin-top: 30px; color: #6b7280; font-size: 12px; }
"""

_LAYOUT = """<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"><style>""" + _STYLE + """</style></head>
<body>
<div class="header" style="background-color: {{ accent }};"><h1>{{ heading }}</h1></div>
<div class="content">
{% block content %}{% endblock %}
<p>Thank you for using BookLib!</p>
</div>
<div class="footer"><p>This is an automated message from BookLib. Please do not reply to this email.</p></div>
</body>
</html>
"""

UPCOMING_HTML = """{% extends "layout" %}
{% block content %}
<h2>Book Due Soon</h2>
<p>Hi there,</p>
<p>This is a friendly reminder that a book you lent out is due in <strong>{{ notice.days_until_due }} day{{ "" if notice.days_until_due == 1 else "s" }}</strong>.</p>
<div class="book" style="border-left: 4px solid {{ accent }};">
  <div><span class="label">Title:</span> {{ notice.book_title }}</div>
  {% if notice.book_author %}<div><span class="label">Author:</span> {{ notice.book_author }}</div>{% endif %}
  <div><span class="label">Lent to:</span> {{ notice.borrower_name }}</div>
  <div><span class="label">Due date:</span> {{ notice.due_at | longdate }}</div>
</div>
<p>You may want to reach out to {{ notice.borrower_name }} to remind them about the upcoming due date.</p>
{% endblock %}
"""

UPCOMING_TEXT = """Book Due Soon

A book you lent out is due in {{ notice.days_until_due }} day{{ "" if notice.days_until_due == 1 else "s" }}.

Title:    {{ notice.book_title }}
{% if notice.book_author %}Author:   {{ notice.book_author }}
{% endif %}Lent to:  {{ notice.borrower_name }}
Due date: {{ notice.due_at | longdate }}

You may want to reach out to {{ notice.borrower_name }} about the upcoming due date.
"""

OVERDUE_HTML = """{% extends "layout" %}
{% block content %}
<h2>Book is Overdue</h2>
<p>Hi there,</p>
<p>A book you lent out is now overdue.</p>
<p><span class="badge">OVERDUE BY {{ notice.days_overdue }} DAY{{ "" if notice.days_overdue == 1 else "S" }}</span></p>
<div class="book" style="border-left: 4px solid {{ accent }};">
  <div><span class="label">Title:</span> {{ notice.book_title }}</div>
  {% if notice.book_author %}<div><span class="label">Author:</span> {{ notice.book_author }}</div>{% endif %}
  <div><span class="label">Lent to:</span> {{ notice.borrower_name }}</div>
  <div><span class="label">Was due:</span> {{ notice.due_at | longdate }}</div>
</div>
<p>We recommend contacting {{ notice.borrower_name }} to request the return of this book.</p>
{% endblock %}
"""

OVERDUE_TEXT = """Book is Overdue

A book you lent out is overdue by {{ notice.days_overdue }} day{{ "" if notice.days_overdue == 1 else "s" }}.

Title:    {{ notice.book_title }}
{% if notice.book_author %}Author:   {{ notice.book_author }}
{% endif %}Lent to:  {{ notice.borrower_name }}
Was due:  {{ notice.due_at | longdate }}
"""

DIGEST_HTML = """{% extends "layout" %}
{% block content %}
<h2>You Have Overdue Books</h2>
<p>Hi there,</p>
<p>You have <strong>{{ items | length }} book{{ "" if items | length == 1 else "s" }}</strong> that {{ "is" if items | length == 1 else "are" }} currently overdue.</p>
{% for item in items %}
<div class="book" style="border-left: 4px solid {{ accent }};">
  <div><strong>{{ item.book_title }}</strong></div>
  {% if item.book_author %}<div><span class="label">Author:</span> {{ item.book_author }}</div>{% endif %}
  <div><span class="label">Lent to:</span> {{ item.borrower_name }}</div>
  <div><span class="label">Was due:</span> {{ item.due_at | longdate }}</div>
  <div><span class="badge">OVERDUE BY {{ item.days_overdue }} DAY{{ "" if item.days_overdue == 1 else "S" }}</span></div>
</div>
{% endfor %}
<p>We recommend reaching out to these borrowers to request the return of your books.</p>
{% endblock %}
"""

DIGEST_TEXT = """You Have Overdue Books

{{ items | length }} book{{ "" if items | length == 1 else "s" }} currently overdue:
{% for item in items %}
- {{ item.book_title }}{% if item.book_author %} by {{ item.book_author }}{% endif %}
  lent to {{ item.borrower_name }}, due {{ item.due_at | longdate }}, overdue by {{ item.days_overdue }} day{{ "" if item.days_overdue == 1 else "s" }}
{% endfor %}
"""


def _longdate(value: datetime) -> str:
    return f"{value:%A, %B} {value.day}, {value.year}"


class _Loader(BaseLoader):
    def get_source(self, environment, template):
        if template != "layout":
            raise TemplateError(f"unknown template {template}")
        return _LAYOUT, None, lambda: True


_HTML_ENV = Environment(loader=_Loader(), autoescape=True, undefined=StrictUndefined)
_TEXT_ENV = Environment(
    loader=_Loader(),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
    undefined=StrictUndefined,
)
for _env in (_HTML_ENV, _TEXT_ENV):
    _env.filters["longdate"] = _longdate


def render(html_source: str, text_source: str, accent: str, heading: str, **context: Any) -> tuple[str, str]:
    """Render the HTML and plain-text bodies of one message.

    Raises:
        NotificationError: If a template fails to render
    """
    try:
        html_body = _HTML_ENV.from_string(html_source).render(
            accent=accent, heading=heading, **context
        )
        text_body = _TEXT_ENV.from_string(text_source).render(**context)
    except TemplateError as exc:
        raise NotificationError("template_render_failed") from exc
    return html_body, text_body.strip() + "\n"
