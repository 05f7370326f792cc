"""
Tests for deterministic tokenizers.
"""
import hashlib
import string

import pytest
from blake3 import blake3

from data_vault.tokenizer import (
    Blake3Tokenizer,
    Sha256Tokenizer,
    Tokenizer,
    get_tokenizer,
)


class TestBlake3Tokenizer:

    def test_matches_blake3_digest(self):
        token = Blake3Tokenizer().tokenize(b"4111111111111111")
        assert token == blake3(b"4111111111111111").hexdigest()

    def test_deterministic(self):
        assert Blake3Tokenizer().tokenize(b"abc") == Blake3Tokenizer().tokenize(b"abc")

    def test_fixed_length_hex(self):
        tokenizer = Blake3Tokenizer()
        for data in (b"a", b"4111111111111111", b"x" * 10_000):
            token = tokenizer.tokenize(data)
            assert len(token) == 64
            assert set(token) <= set(string.hexdigits.lower())

    def test_distinct_inputs(self):
        tokenizer = Blake3Tokenizer()
        tokens = {tokenizer.tokenize(str(n).encode()) for n in range(1000)}
        assert len(tokens) == 1000

    def test_truncated_length(self):
        full = Blake3Tokenizer().tokenize(b"abc")
        short = Blake3Tokenizer(length=32).tokenize(b"abc")
        assert short == full[:32]

    def test_accepts_bytearray(self):
        assert Blake3Tokenizer().tokenize(bytearray(b"abc")) == Blake3Tokenizer().tokenize(b"abc")


class TestSha256Tokenizer:

    def test_matches_sha256_digest(self):
        token = Sha256Tokenizer().tokenize(b"4111111111111111")
        assert token == hashlib.sha256(b"4111111111111111").hexdigest()

    def test_differs_from_blake3(self):
        assert Sha256Tokenizer().tokenize(b"abc") != Blake3Tokenizer().tokenize(b"abc")


class TestTokenizerConfiguration:

    @pytest.mark.parametrize("length", [0, 8, 15, 17, 33, 65, 128, "64"])
    def test_invalid_length(self, length):
        with pytest.raises(ValueError):
            Blake3Tokenizer(length=length)

    def test_factory(self):
        assert isinstance(get_tokenizer("blake3"), Blake3Tokenizer)
        assert isinstance(get_tokenizer("SHA256", 32), Sha256Tokenizer)
        assert get_tokenizer("sha256", 32).length == 32

    def test_factory_unknown(self):
        with pytest.raises(ValueError, match="Unsupported tokenizer"):
            get_tokenizer("md5")

    def test_implements_protocol(self):
        assert isinstance(Blake3Tokenizer(), Tokenizer)
        assert isinstance(Sha256Tokenizer(), Tokenizer)
