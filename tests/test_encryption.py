"""
Tests for the vault encryption components.

Tests cover:
- Round-trip for AES-GCM and ChaCha20-Poly1305
- Fresh nonce per call and ciphertext layout
- Tamper, wrong key and wrong IV detection
- Malformed ciphertext and invalid key material
"""
import pytest

from data_vault.encryption import (
    AesGcmEncryption,
    ChaCha20Poly1305Encryption,
    Encryption,
    MIN_CIPHERTEXT_SIZE,
    NONCE_SIZE,
    TAG_SIZE,
    derive_key,
    get_encryption,
)
from data_vault.exceptions import AuthenticationError, FormatError, InvalidKeyError

KEY_128 = bytes.fromhex("000102030405060708090a0b0c0d0e0f")
KEY_256 = bytes(range(32))
IV = bytes.fromhex("f0f1f2f3f4f5f6f7f8f9fafbfcfdfeff")


@pytest.fixture(params=["aesgcm", "chacha20"])
def cipher(request):
    """Both AEAD ciphers with a 256-bit key and an IV."""
    return get_encryption(request.param, KEY_256, IV)


class TestRoundTrip:
    """Encrypt then decrypt returns the original plaintext."""

    def test_bytes_round_trip(self, cipher):
        plaintext = b"4111111111111111"
        assert cipher.decrypt(cipher.encrypt(plaintext)) == plaintext

    def test_binary_payload(self, cipher):
        plaintext = bytes(range(256)) * 4
        assert cipher.decrypt(cipher.encrypt(plaintext)) == plaintext

    def test_string_helpers(self, cipher):
        text = "Hello world! ¡Olé!"
        assert cipher.decrypt_string(cipher.encrypt_string(text)) == text

    def test_aes128_key(self):
        enc = AesGcmEncryption(KEY_128, IV)
        assert enc.decrypt(enc.encrypt(b"Hello world!")) == b"Hello world!"

    def test_without_iv(self):
        enc = AesGcmEncryption(KEY_256)
        assert enc.decrypt(enc.encrypt(b"data")) == b"data"

    def test_implements_protocol(self, cipher):
        assert isinstance(cipher, Encryption)


class TestCiphertextLayout:
    """Nonce handling and blob size."""

    def test_fresh_nonce_each_call(self, cipher):
        first = cipher.encrypt(b"same input")
        second = cipher.encrypt(b"same input")
        assert first != second
        assert first[:NONCE_SIZE] != second[:NONCE_SIZE]

    def test_ciphertext_length(self, cipher):
        plaintext = b"x" * 37
        assert len(cipher.encrypt(plaintext)) == NONCE_SIZE + len(plaintext) + TAG_SIZE

    def test_plaintext_not_visible(self, cipher):
        plaintext = b"4111111111111111"
        assert plaintext not in cipher.encrypt(plaintext)


class TestTamperDetection:
    """Any modification fails authentication."""

    def test_every_bit_flip_detected(self):
        enc = AesGcmEncryption(KEY_128, IV)
        blob = enc.encrypt(b"4111111111111111")
        for position in range(len(blob)):
            for bit in (0x01, 0x80):
                tampered = bytearray(blob)
                tampered[position] ^= bit
                with pytest.raises(AuthenticationError):
                    enc.decrypt(bytes(tampered))

    def test_truncated_payload(self, cipher):
        blob = cipher.encrypt(b"4111111111111111")
        with pytest.raises(AuthenticationError):
            cipher.decrypt(blob[:-1])

    def test_wrong_key(self):
        blob = AesGcmEncryption(KEY_256, IV).encrypt(b"secret")
        with pytest.raises(AuthenticationError):
            AesGcmEncryption(bytes(32), IV).decrypt(blob)

    def test_wrong_iv(self):
        blob = AesGcmEncryption(KEY_256, IV).encrypt(b"secret")
        with pytest.raises(AuthenticationError):
            AesGcmEncryption(KEY_256, bytes(16)).decrypt(blob)

    def test_same_message_for_wrong_key_and_tamper(self):
        enc = AesGcmEncryption(KEY_256, IV)
        blob = enc.encrypt(b"secret")
        tampered = bytearray(blob)
        tampered[-1] ^= 0x01
        with pytest.raises(AuthenticationError) as tamper_err:
            enc.decrypt(bytes(tampered))
        with pytest.raises(AuthenticationError) as key_err:
            AesGcmEncryption(bytes(32), IV).decrypt(blob)
        assert str(tamper_err.value) == str(key_err.value)

    @pytest.mark.parametrize("size", [0, 1, NONCE_SIZE, MIN_CIPHERTEXT_SIZE - 1])
    def test_too_short(self, cipher, size):
        with pytest.raises(FormatError):
            cipher.decrypt(b"\x00" * size)


class TestKeyMaterial:
    """Construction-time validation."""

    @pytest.mark.parametrize("size", [0, 8, 15, 17, 31, 33, 64])
    def test_aes_wrong_key_length(self, size):
        with pytest.raises(InvalidKeyError):
            AesGcmEncryption(bytes(size))

    @pytest.mark.parametrize("size", [16, 24])
    def test_chacha_requires_256_bit_key(self, size):
        with pytest.raises(InvalidKeyError):
            ChaCha20Poly1305Encryption(bytes(size))

    @pytest.mark.parametrize("size", [0, 12, 15, 32])
    def test_wrong_iv_length(self, size):
        with pytest.raises(InvalidKeyError):
            AesGcmEncryption(KEY_256, bytes(size))

    def test_key_must_be_bytes(self):
        with pytest.raises(InvalidKeyError):
            AesGcmEncryption("000102030405060708090a0b0c0d0e0f")

    def test_invalid_key_error_is_value_error(self):
        with pytest.raises(ValueError):
            AesGcmEncryption(b"short")

    def test_unknown_cipher(self):
        with pytest.raises(ValueError, match="Unsupported cipher"):
            get_encryption("des", KEY_256)

    def test_cipher_name_case_insensitive(self):
        assert isinstance(get_encryption("AESGCM", KEY_256), AesGcmEncryption)

    def test_repr_hides_key(self):
        enc = AesGcmEncryption(KEY_256, IV)
        assert KEY_256.hex() not in repr(enc)


class TestDeriveKey:
    """HKDF working-key derivation."""

    def test_deterministic(self):
        assert derive_key(KEY_256, IV, "ctx") == derive_key(KEY_256, IV, "ctx")

    def test_keeps_key_length(self):
        assert len(derive_key(KEY_128, IV, "ctx")) == 16
        assert len(derive_key(KEY_256, None, "ctx")) == 32

    def test_salt_and_context_separate_keys(self):
        base = derive_key(KEY_256, IV, "ctx")
        assert derive_key(KEY_256, bytes(16), "ctx") != base
        assert derive_key(KEY_256, IV, "other") != base
        assert base != KEY_256
