"""
Tests for MessageVerifier.

Tests cover:
- Missing secret / hasher / serializer
- Known SHA-1 vectors
- Round trips under SHA-1, SHA-256, SHA-512 and MD5
- Tamper detection and malformed tokens
"""
import dataclasses
import hashlib

import pytest

from cookie_crypto.exceptions import (
    AuthenticationError,
    ConfigurationError,
    FormatError,
    HasherNotSet,
    InvalidMessage,
    SecretNotSet,
    SerializerNotSet,
)
from cookie_crypto.serializers import JSONSerializer, NullSerializer, XMLSerializer
from cookie_crypto.verifier import MessageVerifier

SECRET = "Hey, I'm a secret!"
SIGNED = "eyJGb28iOiJmb28iLCJCYXIiOjQyfQ==--b1bdb9d2b372f19dcca800e5989ee7502f1b72a5"


@dataclasses.dataclass
class Sample:
    Foo: str
    Bar: int


@pytest.fixture
def verifier():
    return MessageVerifier(SECRET, hasher="sha1", serializer=JSONSerializer())


def _swap(char: str, alphabet: str) -> str:
    return alphabet[1] if char == alphabet[0] else alphabet[0]


class TestMalformedVerifier:
    """Verifiers missing a setting refuse to work."""

    @pytest.mark.parametrize("kwargs, error, message", [
        ({"secret": SECRET, "hasher": "sha1", "serializer": None}, SerializerNotSet, "Serializer not set"),
        ({"secret": SECRET, "hasher": None, "serializer": JSONSerializer()}, HasherNotSet, "Hasher not set"),
        ({"secret": None, "hasher": "sha1", "serializer": JSONSerializer()}, SecretNotSet, "Secret not set"),
        ({"secret": "", "hasher": "sha1", "serializer": JSONSerializer()}, SecretNotSet, "Secret not set"),
    ])
    def test_generate_and_verify_fail(self, kwargs, error, message):
        """Each missing setting raises its own error on generate and verify."""
        v = MessageVerifier(**kwargs)
        assert v.is_valid() is False
        with pytest.raises(error, match=message):
            v.generate("foo")
        with pytest.raises(error, match=message):
            v.verify("foo", str)

    def test_serializer_checked_first(self):
        """The serializer is checked before hasher and secret."""
        v = MessageVerifier(None, hasher=None, serializer=None)
        with pytest.raises(SerializerNotSet):
            v.generate("foo")

    def test_unknown_hasher(self):
        """Unknown hash names raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            MessageVerifier(SECRET, hasher="whirlpool")

    @pytest.mark.parametrize("hasher", [hashlib.sha3_256, 42, b"sha1"])
    def test_unsupported_hasher_values(self, hasher):
        """Unsupported hash constructors and non-name values raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            MessageVerifier(SECRET, hasher=hasher)

    def test_default_serializer_per_instance(self):
        """Each verifier gets its own default JSON serializer."""
        first = MessageVerifier(SECRET)
        second = MessageVerifier(SECRET)
        assert isinstance(first.serializer, JSONSerializer)
        assert first.serializer is not second.serializer

    def test_configured_verifier_is_valid(self, verifier):
        """A complete verifier reports itself valid."""
        assert verifier.is_valid() is True


class TestKnownVectors:
    """SHA-1 vectors shared with Rails."""

    def test_digest_for(self, verifier):
        """HMAC-SHA1 digest matches the Rails value."""
        digest = verifier.digest_for("eyJGb28iOiJmb28iLCJCYXIiOjQyfQ==")
        assert digest == "b1bdb9d2b372f19dcca800e5989ee7502f1b72a5"

    def test_generate_dict(self, verifier):
        """A dict signs to the Rails token."""
        assert verifier.generate({"Foo": "foo", "Bar": 42}) == SIGNED

    def test_generate_dataclass(self, verifier):
        """A dataclass signs to the same token as the dict."""
        assert verifier.generate(Sample(Foo="foo", Bar=42)) == SIGNED

    def test_generate_sorted_map(self, verifier):
        """A three-key map signs to the Rails token."""
        value = {"bar": 42, "baz": ["bar", "baz"], "foo": "this is foo"}
        assert verifier.generate(value) == (
            "eyJiYXIiOjQyLCJiYXoiOlsiYmFyIiwiYmF6Il0sImZvbyI6InRoaXMgaXMgZm9vIn0="
            "--895bf35965ebef12451372225ff3f73428f48e90"
        )

    def test_verify_into_dataclass(self, verifier):
        """verify populates a dataclass target."""
        assert verifier.verify(SIGNED, Sample) == Sample(Foo="foo", Bar=42)

    def test_verify_without_target(self, verifier):
        """verify without a target returns the decoded dict."""
        assert verifier.verify(SIGNED) == {"Foo": "foo", "Bar": 42}

    def test_digest_is_lower_hex(self, verifier):
        """Digests are lower-case hex."""
        digest = verifier.digest_for("anything")
        assert digest == digest.lower()
        int(digest, 16)


class TestRoundTrip:
    """Round trips for every supported hash."""

    @pytest.mark.parametrize("hasher, digest_len", [
        ("sha1", 40), ("sha256", 64), ("sha512", 128), ("md5", 32),
    ])
    def test_json_round_trip(self, hasher, digest_len):
        """JSON round trip with the expected digest length per hash."""
        v = MessageVerifier(SECRET, hasher=hasher, serializer=JSONSerializer())
        data = Sample(Foo="foo", Bar=42)
        token = v.generate(data)
        assert len(token.split("--")[1]) == digest_len
        assert v.verify(token, Sample) == data

    @pytest.mark.parametrize("constructor, name", [
        (hashlib.sha1, "sha1"),
        (hashlib.sha256, "sha256"),
        (hashlib.sha512, "sha512"),
        (hashlib.md5, "md5"),
    ])
    def test_hashlib_constructor(self, constructor, name):
        """hashlib constructors select the matching hash."""
        v = MessageVerifier(SECRET, hasher=constructor, serializer=JSONSerializer())
        assert v.hasher.name == name
        assert v.verify(v.generate("foo"), str) == "foo"

    def test_hashlib_sha1_matches_rails(self):
        """hashlib.sha1 signs exactly like the "sha1" name."""
        v = MessageVerifier(SECRET, hasher=hashlib.sha1, serializer=JSONSerializer())
        assert v.generate({"Foo": "foo", "Bar": 42}) == SIGNED

    def test_xml_round_trip(self):
        """XML payloads round trip."""
        v = MessageVerifier("Hey, I'm another secret!", serializer=XMLSerializer())
        data = Sample(Foo="foo", Bar=42)
        assert v.verify(v.generate(data), Sample) == data

    def test_null_round_trip(self):
        """Pass-through payloads round trip with a bytes secret."""
        v = MessageVerifier(b"bytes secret", serializer=NullSerializer())
        assert v.verify(v.generate("plain text"), str) == "plain text"

    def test_different_secret_rejects(self, verifier):
        """A token from another secret is rejected."""
        other = MessageVerifier("another secret", serializer=JSONSerializer())
        with pytest.raises(AuthenticationError):
            other.verify(verifier.generate("foo"))


class TestTampering:
    """Tampered or malformed tokens are rejected."""

    def test_reversed_data(self, verifier):
        """Reversed data fails authentication."""
        data, digest = SIGNED.split("--")
        with pytest.raises(AuthenticationError, match="Invalid signature - bad data"):
            verifier.verify(data[::-1] + "--" + digest, Sample)

    def test_reversed_digest(self, verifier):
        """A reversed digest fails authentication."""
        data, digest = SIGNED.split("--")
        with pytest.raises(AuthenticationError, match="Invalid signature - bad data"):
            verifier.verify(data + "--" + digest[::-1], Sample)

    def test_garbage_data(self, verifier):
        """Garbage raises the bad data message."""
        with pytest.raises(InvalidMessage, match="Invalid signature - bad data"):
            verifier.verify("garbage data", Sample)

    def test_garbage_is_format_error(self, verifier):
        """Garbage without a separator is a FormatError."""
        with pytest.raises(FormatError):
            verifier.verify("garbage data")

    def test_too_many_segments(self, verifier):
        """Extra segments are a FormatError."""
        with pytest.raises(FormatError, match="bad data"):
            verifier.verify(SIGNED + "--extra")

    def test_empty_message(self, verifier):
        """An empty token is a FormatError."""
        with pytest.raises(FormatError, match="Invalid signature - empty message"):
            verifier.verify("")

    def test_every_data_byte_flip(self, verifier):
        """Changing any data character fails authentication."""
        data, digest = SIGNED.split("--")
        alphabet = "AB"
        for i, char in enumerate(data):
            tampered = data[:i] + _swap(char, alphabet) + data[i + 1:]
            with pytest.raises(AuthenticationError):
                verifier.verify(tampered + "--" + digest)

    def test_every_digest_byte_flip(self, verifier):
        """Changing any digest character fails authentication."""
        data, digest = SIGNED.split("--")
        for i, char in enumerate(digest):
            tampered = digest[:i] + _swap(char, "0f") + digest[i + 1:]
            with pytest.raises(AuthenticationError):
                verifier.verify(data + "--" + tampered)

    def test_signed_but_invalid_base64(self, verifier):
        """Correctly signed non-base64 data is a FormatError."""
        data = "not*base64"
        with pytest.raises(FormatError):
            verifier.verify(data + "--" + verifier.digest_for(data))


class TestValidMessage:
    """Tests for valid_message()."""

    def test_valid(self, verifier):
        """A correctly signed token is valid."""
        assert verifier.valid_message(SIGNED) is True

    @pytest.mark.parametrize("token", ["", "garbage data", SIGNED[::-1], SIGNED + "0"])
    def test_invalid(self, verifier, token):
        """Malformed or tampered tokens are not valid."""
        assert verifier.valid_message(token) is False
