"""The Command Line Interface for the utility, including Interactive elements.

A hybrid CLI/ICLI (Command Line Interface/Interactive Command Line Interface) that asks interactively for whatever
the command line left out, unless non-interactive mode is active. Prompts and progress go to stderr so that
ciphertext and plaintext can be piped through stdout.

Typical usage example:

    rsafile keygen --bits 512 --identity alice
    rsafile encrypt -n -p rsa.pub -i notes.txt -o notes.enc
    python -m rsafile decrypt -n -P rsa.priv -i notes.enc
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import argparse
import contextlib
import getpass
import logging
import pathlib
import sys
import typing

import rsafile
from rsafile import keygen
from rsafile import pem
from rsafile.randstate import RandState


class HelpData(typing.NamedTuple):
    description: str
    format: typing.Type = str
    choices: list[str] | None = None
    default: typing.Any = None
    advanced: bool = False
    optional: bool = False


help_dict: dict[str, HelpData] = {
    "subcommand":
        HelpData(
            description="The available subcommands in rsafile.",
            choices=["keygen", "encrypt", "decrypt", "verify"],
        ),
    "keygen":
        HelpData("Key pair generation utility."),
    "encrypt":
        HelpData("File encryption utility."),
    "decrypt":
        HelpData("File decryption utility."),
    "verify":
        HelpData("Public key identity verification utility."),
    "public_key":
        HelpData(
            description="Location of the public key file.",
            format=pathlib.Path,
            default=pathlib.Path("rsa.pub"),
        ),
    "private_key":
        HelpData(
            description="Location of the private key file.",
            format=pathlib.Path,
            default=pathlib.Path("rsa.priv"),
        ),
    "bits":
        HelpData(
            description="Minimum bits of the public modulus.",
            format=int,
            default=256,
        ),
    "iters":
        HelpData(
            description="Miller-Rabin iterations for testing primes.",
            format=int,
            advanced=True,
            default=keygen.DEFAULT_ITERS,
        ),
    "seed":
        HelpData(
            description="Random seed, for reproducible keys. System entropy if absent.",
            format=int,
            advanced=True,
            optional=True,
        ),
    "identity":
        HelpData(
            description="Identity signed into the public key (base-62). Defaults to the login name.",
            advanced=True,
            optional=True,
        ),
    "pem":
        HelpData(
            description="Also export the public modulus and exponent as PKCS#1 PEM to this file.",
            format=pathlib.Path,
            advanced=True,
            optional=True,
        ),
    "infile":
        HelpData(
            description="Input file, `-` for stdin.",
            advanced=True,
            default="-",
        ),
    "outfile":
        HelpData(
            description="Output file, `-` for stdout.",
            advanced=True,
            default="-",
        ),
    "overwrite":
        HelpData(
            description="Overwrite specified destination files if they exist?",
            choices=["Y", "N"],
            default="N",
        )
}

needs = {
    "keygen": ("public_key", "private_key", "bits", "iters", "seed", "identity", "pem"),
    "encrypt": ("public_key", "infile", "outfile"),
    "decrypt": ("private_key", "infile", "outfile"),
    "verify": ("public_key",),
}

pubkey = argparse.ArgumentParser(add_help=False)
pubkey.add_argument("--public-key", "-p", type=help_dict["public_key"].format, help=help_dict["public_key"].description)
privkey = argparse.ArgumentParser(add_help=False)
privkey.add_argument("--private-key",
                     "-P",
                     type=help_dict["private_key"].format,
                     help=help_dict["private_key"].description)
streams = argparse.ArgumentParser(add_help=False)
streams.add_argument("--infile", "-i", type=help_dict["infile"].format, help=help_dict["infile"].description)
streams.add_argument("--outfile", "-o", type=help_dict["outfile"].format, help=help_dict["outfile"].description)
corep = argparse.ArgumentParser(prog="rsafile")
corep.add_argument("--version", "-V", action="version", version=f"%(prog)s {rsafile.__version__}")
corep.add_argument("--non-interactive", "-n", action="store_true", help="Enable non-interactive mode")
corep.add_argument("--advanced", "-a", action="store_true", help="Enable advanced mode, for interactive mode")
corep.add_argument("--verbose", "-v", action="store_true", help="Display key material sizes and values")
corep.add_argument("--log-level",
                   default="WARNING",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                   help="Logging verbosity")
commands = corep.add_subparsers(dest="subcommand", title="Subcommands")

keygen_p = commands.add_parser("keygen", parents=[privkey, pubkey], help=help_dict["keygen"].description)
keygen_p.add_argument("--bits", "-b", type=help_dict["bits"].format, help=help_dict["bits"].description)
keygen_p.add_argument("--iters", type=help_dict["iters"].format, help=help_dict["iters"].description)
keygen_p.add_argument("--seed", "-s", type=help_dict["seed"].format, help=help_dict["seed"].description)
keygen_p.add_argument("--identity", "-u", type=help_dict["identity"].format, help=help_dict["identity"].description)
keygen_p.add_argument("--pem", type=help_dict["pem"].format, help=help_dict["pem"].description)
keygen_p.add_argument("--overwrite", action="store_const", const="Y", help=help_dict["overwrite"].description)
commands.add_parser("encrypt", parents=[pubkey, streams], help=help_dict["encrypt"].description)
commands.add_parser("decrypt", parents=[privkey, streams], help=help_dict["decrypt"].description)
commands.add_parser("verify", parents=[pubkey], help=help_dict["verify"].description)


def eprint(*args, **kwargs) -> None:
    print(*args, file=sys.stderr, **kwargs)


def checkmodes(arg: str, mode: tuple[bool, bool]):
    helper_data = help_dict[arg]
    skip = mode[0] or (helper_data.advanced and not mode[1])
    if skip and (helper_data.default is not None or helper_data.optional):
        return helper_data.default
    if mode[0]:
        raise IOError(f"Argument {arg} is missing and non-interactive mode is active.")
    return helper_data


def choice_handler(arg: str, mode: tuple[bool, bool], prntr: typing.Callable = eprint):
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


def input_handler(arg: str, mode: tuple[bool, bool], prntr: typing.Callable = eprint):
    helper_data = checkmodes(arg, mode)
    if not isinstance(helper_data, HelpData):
        return helper_data
    prntr(f"Please specify the {arg}!")
    prntr("Description: " + helper_data.description)
    if helper_data.default is not None:
        prntr(f"Default value: {helper_data.default}")
    if helper_data.default is not None or helper_data.optional:
        prntr("To accept default just click enter. Otherwise specify value.")
    cls = helper_data.format
    while True:
        ch = input(f"{arg}: ")
        if not ch and (helper_data.default is not None or helper_data.optional):
            return helper_data.default
        if ch == "":
            prntr("Please provide a value.")
            continue
        try:
            return cls(ch)
        except ValueError:
            prntr(f"We could not convert your value to {cls.__name__}.")


def open_stream(path: str, mode: str) -> typing.ContextManager[typing.IO]:
    """Open `path`, or wrap the matching standard stream if it is `-`."""
    binary = "b" in mode
    if path == "-":
        std = sys.stdin if "r" in mode else sys.stdout
        return contextlib.nullcontext(std.buffer if binary else std)
    if binary:
        return open(path, mode)
    return open(path, mode, encoding="ascii")


def describe(name: str, value: int) -> str:
    return f"{name} ({value.bit_length()} bits) = {value}"


def run(args: argparse.Namespace, pspr: typing.Callable) -> None:
    """Execute the fully resolved subcommand."""
    match args.subcommand:
        case "keygen":
            if args.private_key.exists() or args.public_key.exists():
                rs = getattr(args, "overwrite", None)
                if rs is None:
                    rs = choice_handler("overwrite", (args.non_interactive, args.advanced), pspr)
                if rs == "N":
                    eprint("Destination private or public key already exists!")
                    sys.exit(1)
            identity = args.identity or getpass.getuser()
            with RandState(args.seed) as rng:
                pub, priv, p, q = rsafile.generate(args.bits, identity, args.iters, rng, expose_primes=True)
            priv.export(args.private_key)
            pub.export(args.public_key)
            if args.pem is not None:
                pem.export_public_pem(pub, args.pem)
            if args.verbose:
                eprint(f"user = {pub.identity}")
                eprint(describe("s", pub.signature))
                eprint(describe("p", p))
                eprint(describe("q", q))
                eprint(describe("n", pub.mod))
                eprint(describe("e", pub.expo))
                eprint(describe("d", priv.expo))
            pspr("\nKey pair generated!")
        case "encrypt":
            pub = rsafile.RSAPubKey.import_key(args.public_key)
            if args.verbose:
                eprint(f"user = {pub.identity}")
                eprint(describe("s", pub.signature))
                eprint(describe("n", pub.mod))
                eprint(describe("e", pub.expo))
            with open_stream(args.infile, "rb") as src, open_stream(args.outfile, "w") as dst:
                pub.encrypt_stream(src, dst)
        case "decrypt":
            priv = rsafile.RSAPrivKey.import_key(args.private_key)
            if args.verbose:
                eprint(describe("n", priv.mod))
                eprint(describe("d", priv.expo))
            with open_stream(args.infile, "r") as src, open_stream(args.outfile, "wb") as dst:
                priv.decrypt_stream(src, dst)
        case "verify":
            pub = rsafile.RSAPubKey.import_key(args.public_key)
            if pub.verify_identity():
                pspr(f"Signature of {pub.identity} Verified!")
            else:
                eprint("Signature Verification Failed!")
                sys.exit(1)


def main():
    """Core Hybrid CLI/ICLI (Command Line Interface/Interactive Command Line Interface)"""
    args = corep.parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")
    pstatus = (args.non_interactive, args.advanced)

    def pspr(text: str):
        """Print only if not in non-interactive mode."""
        if not pstatus[0]:
            eprint(text)

    pspr("Welcome to rsafile!\n")
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
        run(args, pspr)
    except (rsafile.RSAFileError, ValueError) as err:
        eprint(f"Error: {err}")
        sys.exit(1)
    pspr("Thank you for using rsafile!")


if __name__ == "__main__":
    main()
