"""
Delivery Tests
==============

Recipient normalization, captions and the HTTP gateway client.
"""

import asyncio

import pytest
import requests

from photobooth.delivery import (
    HttpImageSender,
    build_caption,
    is_valid_phone_number,
    normalize_phone_number,
    normalize_recipients,
    sanitize_caption,
)
from photobooth.errors import DeliveryFailed
from photobooth.models.delivery import SendRequest


class FakeResponse:
    def __init__(self, payload=None, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """Stands in for requests.Session, recording post() calls."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


def send_request(**overrides) -> SendRequest:
    data = {
        "image_bytes": b"\xff\xd8jpeg",
        "mime_type": "image/jpeg",
        "recipients": ["08123456789"],
        "caption": "",
    }
    data.update(overrides)
    return SendRequest(**data)


class TestPhoneNumbers:
    """Tests for number normalization."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("08123456789", "628123456789"),
            ("+628123456789", "628123456789"),
            ("628123456789", "628123456789"),
            ("8123456789", "628123456789"),
            ("+62 812 3456 789", "628123456789"),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_phone_number(raw) == expected

    @pytest.mark.parametrize("raw", ["", "12345", "0812345678901234", None])
    def test_invalid(self, raw):
        assert not is_valid_phone_number(raw)

    def test_normalize_invalid_raises(self):
        with pytest.raises(ValueError):
            normalize_phone_number("123")

    def test_recipients_deduplicated_in_order(self):
        assert normalize_recipients(["08123456789", "+6281111111111", "8123456789"]) == [
            "628123456789",
            "6281111111111",
        ]

    def test_recipients_report_every_invalid_number(self):
        with pytest.raises(ValueError, match="Invalid numbers: 123, abc"):
            normalize_recipients(["08123456789", "123", "abc"])


class TestCaption:
    """Tests for caption handling."""

    def test_sanitize_strips_control_characters(self):
        assert sanitize_caption("hi\x07 there\x00\nbye\r") == "hi there\nbye\r"

    def test_default_message_appended(self):
        assert build_caption("Hello! ", "Thanks") == "Hello! Thanks"

    def test_default_message_alone(self):
        assert build_caption("", "Thanks") == "Thanks"


class TestHttpImageSender:
    """Tests for HttpImageSender with a fake HTTP session."""

    def test_success(self):
        session = FakeSession(FakeResponse({"success": True, "messageIds": ["a", 2]}))
        sender = HttpImageSender("http://gateway/send", default_message="Thanks", session=session)

        result = asyncio.run(sender.send(send_request(
            recipients=["08123456789", "+6281111111111"],
            caption="Hi\x01 ",
        )))

        assert result.success
        assert result.message_ids == ["a", "2"]
        assert sender.sent_count == 1

        url, kwargs = session.calls[0]
        assert url == "http://gateway/send"
        assert kwargs["files"]["file"] == ("photobooth.jpg", b"\xff\xd8jpeg", "image/jpeg")
        assert kwargs["data"] == [
            ("to", "628123456789"),
            ("to", "6281111111111"),
            ("caption", "Hi Thanks"),
        ]
        assert kwargs["timeout"] == 30.0

    def test_gateway_rejection(self):
        session = FakeSession(FakeResponse({"success": False, "message": "not ready"}, 503))
        sender = HttpImageSender("http://gateway/send", session=session)

        result = asyncio.run(sender.send(send_request()))

        assert not result.success
        assert result.error == "not ready"
        assert sender.failed_count == 1

    def test_transport_error(self):
        session = FakeSession(error=requests.ConnectionError("refused"))
        sender = HttpImageSender("http://gateway/send", session=session)

        with pytest.raises(DeliveryFailed):
            asyncio.run(sender.send(send_request()))
        assert sender.failed_count == 1

    def test_non_json_response(self):
        session = FakeSession(FakeResponse(None, 502))
        sender = HttpImageSender("http://gateway/send", session=session)

        with pytest.raises(DeliveryFailed, match="HTTP 502"):
            asyncio.run(sender.send(send_request()))

    def test_invalid_recipient_not_sent(self):
        session = FakeSession(FakeResponse({"success": True}))
        sender = HttpImageSender("http://gateway/send", session=session)

        with pytest.raises(ValueError):
            asyncio.run(sender.send(send_request(recipients=["42"])))
        assert session.calls == []

    def test_png_filename(self):
        session = FakeSession(FakeResponse({"success": True}))
        sender = HttpImageSender("http://gateway/send", session=session)

        asyncio.run(sender.send(send_request(mime_type="image/png")))

        assert session.calls[0][1]["files"]["file"][0] == "photobooth.png"
