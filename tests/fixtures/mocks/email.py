# tests/fixtures/mocks/email.py
"""
Recording notifier: captures every message instead of sending it, so tests
can read the plaintext code out of the email body.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional

import pytest

_CODE_RE = re.compile(r"Your OTP code is:\s*(\d+)")


@dataclass
class SentEmail:
    to: str
    subject: str
    text: str
    html: str


@dataclass
class RecordingNotifier:
    fail: bool = False
    sent: List[SentEmail] = field(default_factory=list)

    async def send(self, to: str, subject: str, text: str, html: str) -> bool:
        self.sent.append(SentEmail(to=to, subject=subject, text=text, html=html))
        return not self.fail

    def last_code(self, to: Optional[str] = None) -> str:
        for mail in reversed(self.sent):
            if to is None or mail.to == to:
                match = _CODE_RE.search(mail.text)
                assert match, "no OTP found in email body"
                return match.group(1)
        raise AssertionError(f"no email sent to {to!r}")


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
