from qr_attendance.sessions.qr_renderer import build_checkin_url
from qr_attendance.sessions.token_generator import TokenGenerator


def test_tokens_are_160_bit_hex_and_distinct():
    gen = TokenGenerator()
    tokens = {gen.generate() for _ in range(200)}

    assert len(tokens) == 200
    for t in tokens:
        assert len(t) == 40
        int(t, 16)


def test_checkin_url_format():
    assert build_checkin_url("http://localhost:3000/", "abc123") == "http://localhost:3000/checkin?token=abc123"
