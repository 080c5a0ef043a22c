"""Textbook RSA in an Academic Sense.

Provides key pair generation from two random probable primes and raw, unpadded encryption and decryption of a
single block. Not meant to protect anything: there is no padding, no chunking and no side-channel resistance.
Under-the-hood it exposes the Miller-Rabin test, the prime generator and the modular inverse it is built on.

Typical usage example:

    kp = generate_keys(1024)
    c = encrypt_message("Hi there!", kp.e, kp.n)
    r = decrypt_message(c, kp.d, kp.n)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from textbookrsa.arith import eea
from textbookrsa.arith import mod_inverse
from textbookrsa.errors import InvalidExponentChoice
from textbookrsa.errors import MessageTooLarge
from textbookrsa.errors import NoInverseExists
from textbookrsa.errors import PrimeSearchAborted
from textbookrsa.errors import UndecodableOutput
from textbookrsa.keygen import is_probable_prime
from textbookrsa.keygen import random_prime
from textbookrsa.rsa import armor_ciphertext
from textbookrsa.rsa import dearmor_ciphertext
from textbookrsa.rsa import decrypt_message
from textbookrsa.rsa import encrypt_message
from textbookrsa.rsa import generate_keys
from textbookrsa.rsa import Keypair
from textbookrsa.rsa import UNDECODABLE_PLACEHOLDER

__version__ = "0.1.0"
__all__ = [
    "Keypair",
    "generate_keys",
    "encrypt_message",
    "decrypt_message",
    "armor_ciphertext",
    "dearmor_ciphertext",
    "is_probable_prime",
    "random_prime",
    "eea",
    "mod_inverse",
    "NoInverseExists",
    "InvalidExponentChoice",
    "MessageTooLarge",
    "PrimeSearchAborted",
    "UndecodableOutput",
    "UNDECODABLE_PLACEHOLDER",
]
