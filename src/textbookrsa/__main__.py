"""The Command Line Interface for the utility.

Generates textbook key pairs and runs raw encryption and decryption from the shell. Keys are passed around as plain
hexadecimal numbers, there is no key file format.

Typical usage example:

    textbookrsa demo
    OR
    python -m textbookrsa keygen --bits 2048
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import argparse
import logging
import sys
import typing

from pyasn1.error import PyAsn1Error

import textbookrsa


class HelpData(typing.NamedTuple):
    description: str
    format: typing.Callable = str
    default: typing.Any = None


def hexint(value: str) -> int:
    """Parse a hexadecimal number, with or without the 0x prefix."""
    return int(value, 16)


help_dict: dict[str, HelpData] = {
    "keygen": HelpData("Key generation utility."),
    "encrypt": HelpData("Encryption utility."),
    "decrypt": HelpData("Decryption utility."),
    "demo": HelpData("Generate a key and run a full encrypt/decrypt round trip."),
    "bits": HelpData("Key size (in bits).", int, 1024),
    "timeout": HelpData("Give up key generation after this many seconds.", float),
    "regenerate": HelpData("Draw new primes instead of failing when the public exponent does not fit them.", bool,
                           False),
    "modulus": HelpData("The modulus n, in hexadecimal.", hexint),
    "exponent": HelpData("The exponent (e to encrypt, d to decrypt), in hexadecimal.", hexint),
    "message": HelpData("Message to encrypt.", str, "Olá, RSA didático!"),
    "ciphertext": HelpData("Ciphertext block in hexadecimal, or an envelope with --armor.", str),
    "armor": HelpData("Emit/accept the ciphertext as a base64 envelope instead of hexadecimal.", bool, False),
    "encoding": HelpData("Payload encoding.", str, "utf-8"),
}

keyp = argparse.ArgumentParser(add_help=False)
keyp.add_argument("--modulus",
                  "-n",
                  required=True,
                  type=help_dict["modulus"].format,
                  help=help_dict["modulus"].description)
keyp.add_argument("--exponent",
                  "-x",
                  required=True,
                  type=help_dict["exponent"].format,
                  help=help_dict["exponent"].description)
sizep = argparse.ArgumentParser(add_help=False)
sizep.add_argument("--bits",
                   "-b",
                   type=help_dict["bits"].format,
                   default=help_dict["bits"].default,
                   help=help_dict["bits"].description)
armorp = argparse.ArgumentParser(add_help=False)
armorp.add_argument("--armor", "-A", action="store_true", help=help_dict["armor"].description)
encp = argparse.ArgumentParser(add_help=False)
encp.add_argument("--encoding",
                  "-e",
                  default=help_dict["encoding"].default,
                  help=help_dict["encoding"].description)
corep = argparse.ArgumentParser(prog="textbookrsa")
corep.add_argument("--version", "-v", action="version", version=f"%(prog)s {textbookrsa.__version__}")
corep.add_argument("--verbose", "-V", action="store_true", help="Enable debug logging")
corep.add_argument("--regenerate", "-r", action="store_true", help=help_dict["regenerate"].description)
corep.add_argument("--timeout",
                   "-t",
                   type=help_dict["timeout"].format,
                   default=help_dict["timeout"].default,
                   help=help_dict["timeout"].description)
commands = corep.add_subparsers(dest="subcommand", title="Subcommands")

commands.add_parser("keygen", parents=[sizep], help=help_dict["keygen"].description)
encrypt = commands.add_parser("encrypt", parents=[keyp, armorp, encp], help=help_dict["encrypt"].description)
encrypt.add_argument("--message", "-m", required=True, help=help_dict["message"].description)
decrypt = commands.add_parser("decrypt", parents=[keyp, armorp, encp], help=help_dict["decrypt"].description)
decrypt.add_argument("--ciphertext", "-c", required=True, help=help_dict["ciphertext"].description)
demo = commands.add_parser("demo", parents=[sizep, encp], help=help_dict["demo"].description)
demo.add_argument("--message",
                  "-m",
                  default=help_dict["message"].default,
                  help=help_dict["message"].description)


def print_keys(keys: textbookrsa.Keypair) -> None:
    print(f"n (hex) = {keys.n:x}")
    print(f"e (hex) = {keys.e:x}")
    print(f"d (hex) = {keys.d:x}")


def main(argv: list[str] | None = None) -> int:
    """Core Command Line Interface."""
    args = corep.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    if not args.subcommand:
        corep.print_help()
        return 2
    try:
        match args.subcommand:
            case "keygen":
                print_keys(textbookrsa.generate_keys(args.bits, regenerate=args.regenerate, timeout=args.timeout))
            case "encrypt":
                ciph = textbookrsa.encrypt_message(args.message, args.exponent, args.modulus, args.encoding)
                if args.armor:
                    print(textbookrsa.armor_ciphertext(ciph, args.modulus))
                else:
                    print(f"{ciph:x}")
            case "decrypt":
                if args.armor:
                    ciph = textbookrsa.dearmor_ciphertext(args.ciphertext)
                else:
                    ciph = hexint(args.ciphertext)
                print(textbookrsa.decrypt_message(ciph, args.exponent, args.modulus, args.encoding))
            case "demo":
                print(f"Generating {args.bits}-bit RSA keys (textbook)...")
                keys = textbookrsa.generate_keys(args.bits, regenerate=args.regenerate, timeout=args.timeout)
                print_keys(keys)
                print(f"\nOriginal message: {args.message}")
                ciph = textbookrsa.encrypt_message(args.message, keys.e, keys.n, args.encoding)
                print(f"Ciphertext (hex): {ciph:x}")
                print(f"Decrypted: {textbookrsa.decrypt_message(ciph, keys.d, keys.n, args.encoding)}")
    except (ValueError, RuntimeError, PyAsn1Error) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
