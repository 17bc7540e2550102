import hmac

import pytest

from utils.errors import InvalidSignature, MalformedToken, ServerMisconfigured, TokenExpired
from utils.verification_token import (
    DecodedToken,
    b64url_decode,
    b64url_encode,
    constant_time_equals,
    decode_token,
    encode_token,
    read_token,
    verify_token,
)

SECRET = "s3cret"
NOW = 1_700_000_000_000
DAY_MS = 24 * 60 * 60 * 1000


def _flip_hex(ch):
    return "0" if ch != "0" else "1"


@pytest.mark.parametrize("subject", ["abc123", "64f1c0de9a8b7", "user.with.dots", "ünïcødé", "a", "x" * 36])
def test_round_trip_recovers_subject(subject):
    token = encode_token(subject, DAY_MS, SECRET, now_ms=NOW)
    assert verify_token(decode_token(token), SECRET, NOW) == subject


def test_token_layout():
    token = encode_token("abc", 1000, SECRET, now_ms=NOW)
    subject_segment, expires, signature = token.split(".")
    assert subject_segment == "YWJj"
    assert expires == str(NOW + 1000)
    assert len(signature) == 64
    assert signature == signature.lower()
    assert "=" not in token


def test_encoding_is_deterministic_for_fixed_clock():
    assert encode_token("abc", 1000, SECRET, now_ms=NOW) == encode_token("abc", 1000, SECRET, now_ms=NOW)


def test_b64url_uses_url_safe_alphabet_and_restores_padding():
    value = "\xfb\xff?>"
    encoded = b64url_encode(value)
    assert "+" not in encoded and "/" not in encoded and "=" not in encoded
    assert b64url_decode(encoded) == value


def test_flipping_any_signature_character_is_rejected():
    token = encode_token("abc", DAY_MS, SECRET, now_ms=NOW)
    subject_segment, expires, signature = token.split(".")
    for i, ch in enumerate(signature):
        tampered = signature[:i] + _flip_hex(ch) + signature[i + 1:]
        with pytest.raises(InvalidSignature):
            read_token(f"{subject_segment}.{expires}.{tampered}", SECRET, NOW)


def test_swapping_subject_invalidates_signature():
    token = encode_token("abc", DAY_MS, SECRET, now_ms=NOW)
    _, expires, signature = token.split(".")
    with pytest.raises(InvalidSignature):
        read_token(f"{b64url_encode('admin')}.{expires}.{signature}", SECRET, NOW)


def test_extending_expiry_invalidates_signature():
    token = encode_token("abc", 1000, SECRET, now_ms=NOW)
    subject_segment, expires, signature = token.split(".")
    with pytest.raises(InvalidSignature):
        read_token(f"{subject_segment}.{int(expires) + DAY_MS}.{signature}", SECRET, NOW)


def test_wrong_secret_is_invalid_signature():
    token = encode_token("abc", DAY_MS, SECRET, now_ms=NOW)
    with pytest.raises(InvalidSignature):
        read_token(token, "other-secret", NOW)


def test_expired_token_with_valid_signature():
    token = encode_token("abc", 1000, SECRET, now_ms=NOW)
    with pytest.raises(TokenExpired):
        read_token(token, SECRET, NOW + 1001)


def test_token_is_still_valid_at_exact_expiry():
    token = encode_token("abc", 1000, SECRET, now_ms=NOW)
    assert read_token(token, SECRET, NOW + 1000) == "abc"


def test_signature_is_checked_before_expiry():
    token = encode_token("abc", 1000, SECRET, now_ms=NOW)
    subject_segment, expires, signature = token.split(".")
    forged = f"{subject_segment}.{expires}.{_flip_hex(signature[0])}{signature[1:]}"
    with pytest.raises(InvalidSignature):
        read_token(forged, SECRET, NOW + DAY_MS)


@pytest.mark.parametrize("token", [
    "",
    "onlyone",
    "two.parts",
    "a.1.b.c",
    "a.1.b.c.d",
    "a..b",
    ".1.b",
    "a.1.",
    "YWJj.notanumber.abcd",
    "YWJj.-5.abcd",
    "YWJj. 5.abcd",
    "YWJj.1e5.abcd",
])
def test_malformed_tokens(token):
    with pytest.raises(MalformedToken):
        read_token(token, SECRET, NOW)


def test_non_string_token_is_malformed():
    with pytest.raises(MalformedToken):
        decode_token(None)


@pytest.mark.parametrize("signature", ["zz" * 32, "ABCDEF" * 10 + "ABCD", "abc", "ab cd"])
def test_non_hex_signature_is_malformed(signature):
    with pytest.raises(MalformedToken):
        verify_token(DecodedToken("YWJj", str(NOW + 1000), signature), SECRET, NOW)


def test_short_hex_signature_is_invalid_not_a_crash():
    with pytest.raises(InvalidSignature):
        verify_token(DecodedToken("YWJj", str(NOW + 1000), "abcd"), SECRET, NOW)


def test_bad_base64_subject_with_valid_signature_is_malformed():
    # Only the secret holder can produce this, but it must not crash.
    payload = f"a.{NOW + 1000}"
    signature = hmac.new(SECRET.encode(), payload.encode(), "sha256").hexdigest()
    with pytest.raises(MalformedToken):
        read_token(f"{payload}.{signature}", SECRET, NOW)


def test_decode_returns_segments():
    decoded = decode_token("YWJj.1234.beef")
    assert decoded == DecodedToken("YWJj", "1234", "beef")
    assert decoded.expires_at_ms == 1234


def test_signature_covers_expiry_segment_as_written():
    subject = b64url_encode("abc")
    padded = f"{subject}.0{NOW + 1000}"
    signature = hmac.new(SECRET.encode(), padded.encode(), "sha256").hexdigest()
    assert read_token(f"{padded}.{signature}", SECRET, NOW) == "abc"

    token = encode_token("abc", 1000, SECRET, now_ms=NOW)
    head, expires, sig = token.split(".")
    with pytest.raises(InvalidSignature):
        read_token(f"{head}.0{expires}.{sig}", SECRET, NOW)


def test_missing_secret_is_server_misconfigured():
    token = encode_token("abc", 1000, SECRET, now_ms=NOW)
    with pytest.raises(ServerMisconfigured):
        read_token(token, "", NOW)
    with pytest.raises(ServerMisconfigured):
        encode_token("abc", 1000, None, now_ms=NOW)


def test_constant_time_equals_handles_length_mismatch():
    assert constant_time_equals(b"abc", b"abcd") is False
    assert constant_time_equals(b"", b"a") is False
    assert constant_time_equals(b"abc", b"abc") is True
    assert constant_time_equals(b"abc", b"abd") is False


def test_replaying_a_token_succeeds_until_expiry():
    token = encode_token("abc", DAY_MS, SECRET, now_ms=NOW)
    assert read_token(token, SECRET, NOW + 1) == "abc"
    assert read_token(token, SECRET, NOW + 2) == "abc"
