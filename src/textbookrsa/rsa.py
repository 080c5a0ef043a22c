"""Provides the textbook RSA transform: key pairs, raw encryption and decryption of a single block.

Everything here is "textbook" RSA: no padding, a single block per message and no protection against side channels.
Messages are encoded text read as big-endian integers and must be smaller than the modulus. A small ASN.1 envelope
is provided to carry a ciphertext block around as text.

Typical usage example:

    kp = generate_keys(1024)
    c = kp.encrypt("Hi there!")
    r = kp.decrypt(c)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import base64
import typing
import warnings

from pyasn1.codec.der import decoder
from pyasn1.codec.der import encoder
from pyasn1.type import namedtype
from pyasn1.type import univ
from pyasn1_modules import rfc8017

from textbookrsa import keygen
from textbookrsa.errors import MessageTooLarge
from textbookrsa.errors import UndecodableOutput

UNDECODABLE_PLACEHOLDER = "<invalid bytes>"

# No real OID exists for pure RSAEP, so we extend the "baseline" rsaEncryption (PKCS v1.5 padded) to branch 0
id_RSAES_pure = rfc8017.rsaEncryption + (0,)


class RSAMessage(univ.Sequence):
    """Due to the unfortunate fact that no RSA-based encryption wrapper exists we make our own!"""
    componentType = namedtype.NamedTypes(
        namedtype.NamedType("encryptionAlgorithm", rfc8017.AlgorithmIdentifier()),
        namedtype.NamedType("encryptedData", univ.OctetString()),
    )


class Keypair(typing.NamedTuple):
    """An RSA key pair.

    Attributes:
        n: The modulus of the keypair.
        e: The public exponent.
        d: The private exponent.
    """
    n: int
    e: int
    d: int

    @property
    def bsize(self) -> int:
        """Length of the modulus in bytes."""
        return (self.n.bit_length() + 7) // 8

    def encrypt(self, message: str, encoding: str = "utf-8") -> int:
        return encrypt_message(message, self.e, self.n, encoding)

    def decrypt(self, ciphertext: int, encoding: str = "utf-8") -> str:
        return decrypt_message(ciphertext, self.d, self.n, encoding)

    @classmethod
    def generate(cls, bits: int, **kwargs) -> "Keypair":
        """Shorthand for `generate_keys`."""
        return generate_keys(bits, **kwargs)


def generate_keys(bits: int,
                  *,
                  rng: keygen.RandomSource | None = None,
                  regenerate: bool = False,
                  timeout: float | None = None) -> Keypair:
    """Generates an RSA key pair with the public exponent fixed to 65537.

    Blocks until two primes are found unless `timeout` is given.

    Args:
        bits: The size of the modulus in bits. Should be even.
        rng: The random source. Defaults to the system CSPRNG.
        regenerate: Whether to draw new primes instead of failing when 65537 does not fit the totient.
        timeout: Optional number of seconds generation may take.

    Returns:
        The new key pair.

    Raises:
        ValueError: If `bits` is below 8.
        InvalidExponentChoice: If the exponent does not fit the primes and `regenerate` is False.
        PrimeSearchAborted: If `timeout` ran out.
    """
    (n, e), (_, d) = keygen.generate_key_pair(bits, keygen.PUBLIC_EXPONENT, rng, regenerate, timeout)
    return Keypair(n, e, d)


def c_rsa(message: int, expo: int, mod: int) -> int:
    """Performs core RSA operation.

    Args:
        message: The int-marshalled message.
        expo: The exponent, public or private.
        mod: The modulus.

    Returns:
        message**expo mod `mod`.

    Raises:
        MessageTooLarge: If the message is out of range for the modulus.
    """
    if not 0 <= message < mod:
        raise MessageTooLarge("Message representative must be in range [0, mod-1]; shorten it or use a larger key.")
    return pow(message, expo, mod)


def encrypt_message(message: str, e: int, n: int, encoding: str = "utf-8") -> int:
    """Encrypts a text message as a single raw RSA block.

    Args:
        message: The message to encrypt.
        e: The public exponent.
        n: The modulus.
        encoding: Text encoding used to get the message bytes. Defaults to UTF-8.

    Returns:
        The ciphertext block.

    Raises:
        MessageTooLarge: If the encoded message is not smaller than `n`.
    """
    return c_rsa(bytes_to_integer(message.encode(encoding)), e, n)


def decrypt_message(ciphertext: int, d: int, n: int, encoding: str = "utf-8") -> str:
    """Decrypts a raw RSA block back into text.

    Leading zero bytes of the plaintext cannot survive the integer round trip and are not restored. Bytes that do not
    decode are reported through an `UndecodableOutput` warning and replaced with `UNDECODABLE_PLACEHOLDER`.
    Under a warnings filter that turns `UndecodableOutput` into an error (e.g. `-W error`) that warning is raised
    instead of the placeholder being returned.

    Args:
        ciphertext: The ciphertext block.
        d: The private exponent.
        n: The modulus.
        encoding: Text encoding of the plaintext. Defaults to UTF-8.

    Returns:
        The decrypted text or the placeholder.
    """
    m = pow(ciphertext, d, n)
    bts = integer_to_bytes(m)
    try:
        return bts.decode(encoding)
    except UnicodeDecodeError:
        warnings.warn(f"Decrypted block is not valid {encoding} text.", UndecodableOutput, stacklevel=2)
        return UNDECODABLE_PLACEHOLDER


def armor_ciphertext(ciphertext: int, n: int) -> str:
    """Wraps a ciphertext block into a base64 DER envelope.

    Args:
        ciphertext: The ciphertext block.
        n: The modulus the block belongs to, fixes the payload length.

    Returns:
        Base64 encoded envelope.

    Raises:
        MessageTooLarge: If the ciphertext is out of range for the modulus.
    """
    if not 0 <= ciphertext < n:
        raise MessageTooLarge("Ciphertext must be in range [0, mod-1].")
    enc_id = rfc8017.AlgorithmIdentifier()
    enc_id["algorithm"] = id_RSAES_pure
    enc_id["parameters"] = univ.Null("")
    pld = RSAMessage()
    pld["encryptionAlgorithm"] = enc_id
    pld["encryptedData"] = integer_to_bytes(ciphertext, (n.bit_length() + 7) // 8)
    return base64.b64encode(encoder.encode(pld)).decode("ascii")


def dearmor_ciphertext(blob: str | bytes) -> int:
    """Unwraps a ciphertext block from its base64 DER envelope.

    Args:
        blob: The base64 encoded envelope.

    Returns:
        The ciphertext block.

    Raises:
        RuntimeError: If the envelope names another algorithm.
        pyasn1.error.PyAsn1Error: If the envelope is malformed.
    """
    ctext = base64.b64decode(blob)
    pld, _ = decoder.decode(ctext, asn1Spec=RSAMessage())
    if pld["encryptionAlgorithm"]["algorithm"] != id_RSAES_pure:
        raise RuntimeError("Unknown encryption algorithm.")
    return bytes_to_integer(bytes(pld["encryptedData"]))


def bytes_to_integer(msg: bytes) -> int:
    """Converts a byte string to an integer in accordance to preset procedures.

    Args:
        msg: The bytes (AKA Octet String) to convert.

    Returns:
        The representative integer.
    """
    return int.from_bytes(msg, byteorder="big", signed=False)


def integer_to_bytes(msg: int, fixedlen: int | None = None) -> bytes:
    """Converts an integer to a byte string.

    Args:
        msg: The integer to unmarshal.
        fixedlen: The target length of the byte string. Defaults to the shortest that fits, zero gives b"".

    Returns:
        The representative bytes. (AKA Octet String)
    """
    if fixedlen is None:
        fixedlen = (msg.bit_length() + 7) // 8
    return msg.to_bytes(fixedlen, byteorder="big", signed=False)
