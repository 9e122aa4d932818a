"""Tests for reminder e-mail templates."""

from datetime import datetime

import pytest

from booklend.exceptions import NotificationError
from booklend.notify import templates


class TestRender:
    """Tests for templates.render."""

    def test_layout_wraps_html(self):
        """The HTML body carries the shared header and footer."""
        html, text = templates.render(
            "{% extends 'layout' %}{% block content %}<p>{{ name }}</p>{% endblock %}",
            "Hello {{ name }}",
            "#123456",
            "Heading",
            name="Ann",
        )

        assert "<h1>Heading</h1>" in html
        assert "background-color: #123456;" in html
        assert "<p>Ann</p>" in html
        assert "automated message from BookLib" in html
        assert text == "Hello Ann\n"

    def test_missing_variable_raises(self):
        """An undefined variable is a render failure."""
        with pytest.raises(NotificationError, match="template_render_failed"):
            templates.render("{{ missing }}", "", "#000", "x")

    def test_longdate_filter(self):
        """Dates read as weekday, month day, year."""
        _, text = templates.render("", "{{ when | longdate }}", "#000", "x", when=datetime(2024, 3, 5))

        assert text == "Tuesday, March 5, 2024\n"

    def test_book_without_author(self):
        """The author line is omitted when unknown."""
        from booklend.notify import LoanNotice

        notice = LoanNotice(
            loan_id="l",
            book_title="Anonymous Tales",
            borrower_name="Carol",
            lent_at=datetime(2024, 3, 1),
            due_at=datetime(2024, 3, 4),
            days_until_due=1,
        )

        html, text = templates.render(
            templates.UPCOMING_HTML, templates.UPCOMING_TEXT, "#000", "x", notice=notice
        )

        assert "Author" not in text
        assert "Author" not in html
        assert "due in 1 day." in text
