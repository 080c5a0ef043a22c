"""Exceptions and warning categories raised by textbookrsa."""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0


class NoInverseExists(ValueError):
    """The operands of a modular inverse share a factor, so no inverse exists."""


class InvalidExponentChoice(RuntimeError):
    """The public exponent is not coprime with the totient of the generated primes.

    Fatal for the generation attempt that produced it; the primes have to be drawn again.
    """


class MessageTooLarge(ValueError):
    """The message representative does not fit in a single block of the modulus."""


class PrimeSearchAborted(RuntimeError):
    """A prime search ran past its attempt cap or deadline."""


class UndecodableOutput(UserWarning):
    """Decrypted bytes are not valid text and were replaced with a placeholder."""
