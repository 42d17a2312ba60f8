"""The Command Line Interface for the library, including Interactive elements.

What I would call a hybrid CLI/ICLI (Command Line Interface/Interactive Command Line Interface) that automagically
generates the INTERACTIVE part on-the-fly based on the missing components of the CLI interaction, including the
option that none are included.

Keys are printed, never written anywhere. RSA keys travel as `exponent:modulus` in decimal, EC private keys as hex
scalars and EC public keys as hex SEC1 points.

Typical usage example:

    cryptomath
    OR
    python -m cryptomath keygen --keysize 1024
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import argparse
import base64
import logging
import sys
import typing

import cryptomath
from cryptomath import config
from cryptomath import curves
from cryptomath import keygen as rsa_keygen
from cryptomath import protocols
from cryptomath import rsa
from cryptomath.errors import CryptoMathError
from cryptomath.hashing import HASH_TLL


def parse_rsa_key(text: str) -> tuple[int, int]:
    """Parse `exponent:modulus`."""
    exponent, sep, modulus = text.partition(":")
    if not sep:
        raise ValueError("Expected exponent:modulus")
    return int(exponent), int(modulus)


def hex_int(text: str) -> int:
    return int(text, 16)


class HelpData(typing.NamedTuple):
    description: str
    format: typing.Callable = str
    choices: list[str] | None = None
    default: typing.Any = None
    advanced: bool = False


help_dict: dict[str, HelpData] = {
    "subcommand":
        HelpData(
            description="The available subcommands in CryptoMath.",
            choices=["keygen", "encrypt", "decrypt", "ec-keygen", "ecdh", "sign", "verify", "curve-info"],
        ),
    "keygen":
        HelpData("RSA key generation utility."),
    "encrypt":
        HelpData("RSA encryption utility."),
    "decrypt":
        HelpData("RSA decryption utility."),
    "ec-keygen":
        HelpData("Elliptic-curve key generation utility."),
    "ecdh":
        HelpData("ECDH key agreement demonstration."),
    "sign":
        HelpData("ECDSA signing utility."),
    "verify":
        HelpData("ECDSA signature verification utility."),
    "curve-info":
        HelpData("Curve parameters and group structure."),
    "public_key":
        HelpData(
            description="RSA public key as e:n.",
            format=parse_rsa_key,
        ),
    "private_key":
        HelpData(
            description="RSA private key as d:n.",
            format=parse_rsa_key,
        ),
    "message":
        HelpData(
            description="Message or path to file containing payload. If Path start with `P:`",
            format=str,
        ),
    "ciphertext":
        HelpData(
            description="Ciphertext integer, in decimal.",
            format=int,
        ),
    "keysize":
        HelpData(
            description="Key size (in bits).",
            choices=[str(size) for size in config.KEY_SIZES],
            default=str(config.DEFAULT_KEY_SIZE),
        ),
    "pub_exponent":
        HelpData(
            description="Exponent for the public key.",
            format=int,
            advanced=True,
            default=config.PUBLIC_EXPONENT,
        ),
    "constant_time":
        HelpData(
            description="Use the constant-time ladders? Slower.",
            choices=["Y", "N"],
            advanced=True,
            default="N",
        ),
    "curve":
        HelpData(description="Named curve.", choices=list(curves.CURVES), default="secp256k1"),
    "ec_private":
        HelpData(
            description="EC private scalar, in hex.",
            format=hex_int,
        ),
    "ec_public":
        HelpData(
            description="EC public point, SEC1-encoded in hex.",
            format=bytes.fromhex,
        ),
    "compressed":
        HelpData(
            description="Print compressed public points?",
            choices=["Y", "N"],
            advanced=True,
            default="N",
        ),
    "sha":
        HelpData(description="Specific SHA algorithm to use",
                 choices=list(HASH_TLL),
                 advanced=True,
                 default=config.DEFAULT_HASH),
    "signature":
        HelpData(
            description="The base64 DER signature to validate against the payload and public key.",
            format=str,
        ),
}

needs = {
    "keygen": ("keysize", "pub_exponent"),
    "encrypt": ("public_key", "message", "constant_time"),
    "decrypt": ("private_key", "ciphertext", "constant_time"),
    "ec-keygen": ("curve", "compressed"),
    "ecdh": ("curve", "constant_time"),
    "sign": ("curve", "ec_private", "message", "sha", "constant_time"),
    "verify": ("curve", "ec_public", "message", "signature", "sha"),
    "curve-info": ("curve",),
}

pubkey = argparse.ArgumentParser(add_help=False)
pubkey.add_argument("--public-key", "-p", type=help_dict["public_key"].format, help=help_dict["public_key"].description)
privkey = argparse.ArgumentParser(add_help=False)
privkey.add_argument("--private-key",
                     "-P",
                     type=help_dict["private_key"].format,
                     help=help_dict["private_key"].description)
payloads = argparse.ArgumentParser(add_help=False)
payloads.add_argument("--message", "-m", type=help_dict["message"].format, help=help_dict["message"].description)
ctime = argparse.ArgumentParser(add_help=False)
ctime.add_argument("--constant-time",
                   "-c",
                   action="store_const",
                   const="Y",
                   help=help_dict["constant_time"].description)
curvep = argparse.ArgumentParser(add_help=False)
curvep.add_argument("--curve", "-C", choices=help_dict["curve"].choices, help=help_dict["curve"].description)
sha = argparse.ArgumentParser(add_help=False)
sha.add_argument("--sha", "-s", choices=help_dict["sha"].choices, help=help_dict["sha"].description)
corep = argparse.ArgumentParser(prog="cryptomath")
corep.add_argument("--version", "-v", action="version", version=f"%(prog)s {cryptomath.__version__}")
corep.add_argument("--non-interactive", "-n", action="store_true", help="Enable non-interactive mode")
corep.add_argument("--advanced", "-a", action="store_true", help="Enable advanced mode, for interactive mode")
corep.add_argument("--verbose", action="store_true", help="Log debug output to stderr")
commands = corep.add_subparsers(dest="subcommand", title="Subcommands")

keygen = commands.add_parser("keygen", help=help_dict["keygen"].description)
keygen.add_argument("--keysize", "-k", choices=help_dict["keysize"].choices, help=help_dict["keysize"].description)
keygen.add_argument("--pub-exponent", type=help_dict["pub_exponent"].format, help=help_dict["pub_exponent"].description)

encrypt = commands.add_parser("encrypt", parents=[pubkey, payloads, ctime], help=help_dict["encrypt"].description)
decrypt = commands.add_parser("decrypt", parents=[privkey, ctime], help=help_dict["decrypt"].description)
decrypt.add_argument("--ciphertext",
                     "-x",
                     type=help_dict["ciphertext"].format,
                     help=help_dict["ciphertext"].description)

ec_keygen = commands.add_parser("ec-keygen", parents=[curvep], help=help_dict["ec-keygen"].description)
ec_keygen.add_argument("--compressed", action="store_const", const="Y", help=help_dict["compressed"].description)
ecdh = commands.add_parser("ecdh", parents=[curvep, ctime], help=help_dict["ecdh"].description)
sign = commands.add_parser("sign", parents=[curvep, payloads, sha, ctime], help=help_dict["sign"].description)
sign.add_argument("--ec-private", "-P", type=help_dict["ec_private"].format, help=help_dict["ec_private"].description)
verify = commands.add_parser("verify", parents=[curvep, payloads, sha], help=help_dict["verify"].description)
verify.add_argument("--ec-public", "-p", type=help_dict["ec_public"].format, help=help_dict["ec_public"].description)
verify.add_argument("--signature", "-S", type=help_dict["signature"].format, help=help_dict["signature"].description)
curve_info = commands.add_parser("curve-info", parents=[curvep], help=help_dict["curve-info"].description)


def checkmodes(arg: str, mode: tuple[bool, bool]):
    helper_data = help_dict[arg]
    if (mode[0] or (helper_data.advanced and not mode[1])) and helper_data.default is not None:
        return helper_data.default
    if mode[0]:
        raise IOError(f"Argument {arg} is missing and non-interactive mode is active.")
    return helper_data


def choice_handler(arg: str, mode: tuple[bool, bool], prntr: typing.Callable = print):
    helper_data = checkmodes(arg, mode)
    if not isinstance(helper_data, HelpData):
        return helper_data
    prntr(f"Please specify the {arg}!")
    prntr("Description: " + helper_data.description)
    choices = helper_data.choices
    vald = set(choices)
    for choice in choices:
        defstring = " (Default)" if choice == helper_data.default else ""
        if help_dict.get(choice, None):
            prntr(f"{choice} - {help_dict[choice].description}" + defstring)
        else:
            prntr(f"{choice}" + defstring)
    if helper_data.default is not None:
        prntr("To accept default just click enter. Otherwise specify value.")
    while True:
        ch = input(f"{arg}: ")
        if ch in vald:
            return ch
        if not ch and helper_data.default is not None:
            return helper_data.default
        prntr("Please select an option from the list.")


def input_handler(arg: str, mode: tuple[bool, bool], prntr: typing.Callable = print):
    helper_data = checkmodes(arg, mode)
    if not isinstance(helper_data, HelpData):
        return helper_data
    prntr(f"Please specify the {arg}!")
    prntr("Description: " + helper_data.description)
    if helper_data.default is not None:
        prntr(f"Default value: {helper_data.default}")
        prntr("To accept default just click enter. Otherwise specify value.")
    cls = helper_data.format
    while True:
        ch = input(f"{arg}: ")
        if not ch and helper_data.default is not None:
            return helper_data.default
        if ch == "":
            prntr("Please provide a value.")
            continue
        try:
            return cls(ch)
        except ValueError:
            prntr(f"We could not convert your value to {cls.__name__}.")


def check_message(mess: str) -> str:
    """Parse message for path-notice."""
    if mess.startswith("P:"):
        mess = mess[2:]
        with open(mess, "r", encoding="utf-8") as f:
            mess = f.read()
    return mess


def run(args: argparse.Namespace, pspr: typing.Callable) -> int:
    """Execute a fully populated subcommand. Returns the process exit code."""
    constant_time = getattr(args, "constant_time", None) == "Y"
    match args.subcommand:
        case "keygen":

            def report(stage: str, info: rsa_keygen.Progress | None) -> None:
                if info is None:
                    pspr(f"  {stage}...")
                elif info.is_prime:
                    pspr(f"    found after {info.attempt} candidates")

            keys = rsa_keygen.generate_key_pair(int(args.keysize), report, args.pub_exponent)
            pspr("Public key (e:n):")
            print(f"{keys.public_key.e}:{keys.public_key.n}")
            pspr("Private key (d:n):")
            print(f"{keys.private_key.d}:{keys.private_key.n}")
        case "encrypt":
            pub = rsa.RSAPublicKey(*args.public_key)
            ciph = rsa.encrypt_string(check_message(args.message), pub, constant_time)
            pspr("Ciphertext:")
            print(ciph)
        case "decrypt":
            priv = rsa.RSAPrivateKey(*args.private_key)
            clear = rsa.decrypt_string(args.ciphertext, priv, constant_time)
            pspr("Cleartext:")
            print(clear)
        case "ec-keygen":
            curve = curves.CURVES[args.curve]
            pair = protocols.ecdh_generate_key_pair(curve)
            pspr("Private key:")
            print(f"{pair.private_key:x}")
            pspr("Public key:")
            print(pair.public_key.to_bytes(args.compressed == "Y").hex())
        case "ecdh":
            curve = curves.CURVES[args.curve]
            alice = protocols.ecdh_generate_key_pair(curve, constant_time)
            bob = protocols.ecdh_generate_key_pair(curve, constant_time)
            pspr(f"Alice public: {alice.public_key}")
            pspr(f"Bob public: {bob.public_key}")
            key_a = protocols.compute_shared_secret(alice.private_key, bob.public_key, curve,
                                                    constant_time=constant_time)
            key_b = protocols.compute_shared_secret(bob.private_key, alice.public_key, curve,
                                                    constant_time=constant_time)
            pspr("Shared secret:")
            print(key_a.hex())
            if key_a != key_b:
                print("Shared secrets differ!")
                return 1
            pspr("Shared secrets match!")
        case "sign":
            curve = curves.CURVES[args.curve]
            signature = protocols.ecdsa_sign(check_message(args.message), args.ec_private, curve, args.sha,
                                             constant_time)
            pspr("Signature:")
            print(base64.b64encode(signature.to_der()).decode("ascii"))
        case "verify":
            curve = curves.CURVES[args.curve]
            public = curves.Point.from_bytes(args.ec_public, curve)
            signature = protocols.Signature.from_der(base64.b64decode(args.signature.encode("ascii")))
            if protocols.ecdsa_verify(check_message(args.message), signature, public, args.sha):
                pspr("Signature Verified!")
            else:
                print("Signature Verification Failed!")
                return 1
        case "curve-info":
            curve = curves.CURVES[args.curve]
            print(curve)
            print(f"a = {curve.a}\nb = {curve.b}\np = {curve.p}")
            if curve.g is not None:
                print(f"G = {curve.generator}\nn = {curve.n}\nh = {curve.h}")
            if curve.p <= config.POINT_COUNT_LIMIT:
                print(f"#E = {curves.count_points(curve)}")
                if curve.g is not None:
                    print(f"ord(G) = {curves.point_order(curve.generator)}")
    return 0


def main(argv: list[str] | None = None):
    """Core Hybrid CLI/ICLI (Command Line Interface/Interactive Command Line Interface)"""
    args = corep.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    pstatus = (args.non_interactive, args.advanced)

    def pspr(text: str):
        """Print only if not in non-interactive mode."""
        if not pstatus[0]:
            print(text)

    pspr("Welcome to CryptoMath!\n")
    if not args.subcommand:
        args.subcommand = choice_handler("subcommand", pstatus)
    for reqs in needs[args.subcommand]:
        if getattr(args, reqs, None) is None:
            if help_dict[reqs].choices is not None:
                res = choice_handler(reqs, pstatus)
            else:
                res = input_handler(reqs, pstatus)
            setattr(args, reqs, res)
        else:
            pspr(f"{reqs}: {getattr(args, reqs)}")
    pspr("\nInput Complete! Executing...")
    try:
        code = run(args, pspr)
    except (CryptoMathError, ValueError, NotImplementedError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    if code:
        sys.exit(code)
    pspr("Thank you for using CryptoMath!")
    pspr("Goodbye!")


if __name__ == "__main__":
    main()
