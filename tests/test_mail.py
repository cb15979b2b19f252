from types import SimpleNamespace

import pytest

from storefinder.services.mail import Mailer, render_password_reset


def test_password_reset_bodies_contain_link():
    text, html_body = render_password_reset("Wes", "http://test/account/reset/abc")

    assert "Hello Wes" in text
    assert "http://test/account/reset/abc" in text
    assert 'href="http://test/account/reset/abc"' in html_body


def test_html_body_escapes_name():
    _, html_body = render_password_reset("<b>Wes</b>", "http://test/account/reset/abc")
    assert "<b>Wes</b>" not in html_body
    assert "&lt;b&gt;Wes&lt;/b&gt;" in html_body


@pytest.mark.asyncio
async def test_unconfigured_mailer_skips_sending(caplog: pytest.LogCaptureFixture):
    mailer = Mailer()
    user = SimpleNamespace(name="Wes", email="wes@example.com")

    assert not mailer.configured
    with caplog.at_level("WARNING", logger="uvicorn.error"):
        await mailer.send_password_reset(user, "http://test/account/reset/abc")

    assert "not configured" in caplog.text
