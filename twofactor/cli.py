#!/usr/bin/env python3
"""
cli.py — command-line wrapper around the twofactor core.

Subcommands:
- secret : generate a new secret and print its otpauth URI
- code   : print the TOTP code for a secret (now or --time)
- hotp   : print the HOTP code for a specific counter
- verify : check a code, exit status 0 (valid) / 1 (invalid)
- uri    : print the otpauth URI for a secret
- qr     : write the QR code of the otpauth URI as an SVG file
- watch  : show TOTP codes in real time
- basic  : encode / decode HTTP Basic authorisation tokens

The secret can be given with --secret or the TWOFACTOR_SECRET environment
variable.
"""

import argparse
import base64
import logging
import os
import sys
import time

from httpauth.basic_auth import BasicAuth, MalformedToken

from . import base32, hotp
from .errors import TwoFactorError
from .one_time_pin import DEFAULT_WINDOW, OneTimePin
from .token import DEFAULT_ISSUER, DEFAULT_LENGTH, DEFAULT_NAME, Token

logger = logging.getLogger(__name__)


def _otp(args) -> OneTimePin:
    if not args.secret:
        raise SystemExit("error: no secret given (use --secret or TWOFACTOR_SECRET)")
    return OneTimePin.from_token_key(args.secret, getattr(args, "name", DEFAULT_NAME))


# --- CLI command handlers ---
def cmd_secret(args):
    token = (
        Token(name=args.name)
        .set_length(args.length)
        .use_alpha(args.lower)
        .use_alpha_upper(args.upper)
        .use_numeric(args.numeric)
        .use_special(args.special)
    )
    print(f"Secret: {token.value}")
    print(f"URI:    {token.provisioning_uri(args.issuer)}")
    return 0


def cmd_code(args):
    otp = _otp(args)
    for_time = args.time if args.time is not None else time.time()
    code = otp.at(for_time)
    print(f"TOTP: {code}  (valid ~{otp.remaining_seconds(for_time):2d}s)")
    return 0


def cmd_hotp(args):
    if not args.secret:
        raise SystemExit("error: no secret given (use --secret or TWOFACTOR_SECRET)")
    code = hotp.generate(base32.decode(args.secret), args.counter)
    print(f"HOTP(counter={args.counter}): {code}")
    return 0


def cmd_verify(args):
    otp = _otp(args)
    if otp.verify(args.code, window=args.window, for_time=args.time):
        print("[+] TOTP code is VALID")
        return 0
    print("[-] TOTP code is INVALID")
    return 1


def cmd_uri(args):
    print(_otp(args).provisioning_uri(args.issuer))
    return 0


def cmd_qr(args):
    image = base64.b64decode(_otp(args).token.image_base64(args.issuer))
    with open(args.output, "wb") as f:
        f.write(image)
    print(f"QR code written to {args.output}")
    return 0


def cmd_watch(args):
    otp = _otp(args)
    print("Press Ctrl+C to quit. Generating TOTP in real time...\n")
    last_code = None
    try:
        while True:
            now = time.time()
            code = otp.at(now)
            remaining = otp.remaining_seconds(now)
            if code != last_code:
                print(f"TOTP: {code}  (valid ~{remaining:2d}s)")
                last_code = code
            else:
                print(f".. {remaining:2d}s left", end="\r", flush=True)
            time.sleep(1)
    except KeyboardInterrupt:
        print("\nBye.")
    return 0


def cmd_basic_encode(args):
    print(BasicAuth.encode(args.username, args.password))
    return 0


def cmd_basic_decode(args):
    auth = BasicAuth.from_token(args.token)
    print(f"username: {auth.username}")
    print(f"password: {auth.password}")
    return 0


def cmd_help(args):
    print("No command specified. Use -h for help.")
    return 0


# --- Argparse builder ---
def _add_secret(p):
    p.add_argument("--secret", default=os.getenv("TWOFACTOR_SECRET"),
                   help="Base32 secret (default: $TWOFACTOR_SECRET)")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="twofactor", description="TOTP secret and code tool")
    p.add_argument("--verbose", action="store_true", help="Verbose (debug) logging")
    sub = p.add_subparsers(dest="cmd")
    p.set_defaults(func=cmd_help)

    # secret
    ps = sub.add_parser("secret", help="Generate a new secret")
    ps.add_argument("--name", default=DEFAULT_NAME, help="Token name for the otpauth URI")
    ps.add_argument("--issuer", default=DEFAULT_ISSUER, help="Issuer for the otpauth URI")
    ps.add_argument("--length", type=int, default=DEFAULT_LENGTH, help="Secret length (8-20)")
    ps.add_argument("--lower", action=argparse.BooleanOptionalAction, default=False,
                    help="Include lower-case letters")
    ps.add_argument("--upper", action=argparse.BooleanOptionalAction, default=True,
                    help="Include upper-case letters")
    ps.add_argument("--numeric", action=argparse.BooleanOptionalAction, default=False,
                    help="Include digits 0-9")
    ps.add_argument("--special", action=argparse.BooleanOptionalAction, default=False,
                    help="Include special characters")
    ps.set_defaults(func=cmd_secret)

    # code
    pc = sub.add_parser("code", help="Print the TOTP code")
    _add_secret(pc)
    pc.add_argument("--time", type=float, help="Unix timestamp to use instead of now")
    pc.set_defaults(func=cmd_code)

    # hotp
    ph = sub.add_parser("hotp", help="Generate HOTP code for a specific counter")
    _add_secret(ph)
    ph.add_argument("--counter", type=int, required=True)
    ph.set_defaults(func=cmd_hotp)

    # verify
    pv = sub.add_parser("verify", help="Verify a TOTP code")
    _add_secret(pv)
    pv.add_argument("--code", required=True, help="OTP code to verify")
    pv.add_argument("--window", type=int, default=DEFAULT_WINDOW, help="Allowed +/- step window")
    pv.add_argument("--time", type=float, help="Unix timestamp to use instead of now")
    pv.set_defaults(func=cmd_verify)

    # uri
    pu = sub.add_parser("uri", help="Print the otpauth URI")
    _add_secret(pu)
    pu.add_argument("--name", default=DEFAULT_NAME)
    pu.add_argument("--issuer", default=DEFAULT_ISSUER)
    pu.set_defaults(func=cmd_uri)

    # qr
    pq = sub.add_parser("qr", help="Write the otpauth URI as an SVG QR code")
    _add_secret(pq)
    pq.add_argument("--name", default=DEFAULT_NAME)
    pq.add_argument("--issuer", default=DEFAULT_ISSUER)
    pq.add_argument("--output", default="otpauth.svg", help="Output file")
    pq.set_defaults(func=cmd_qr)

    # watch
    pw = sub.add_parser("watch", help="Show TOTP code in real time")
    _add_secret(pw)
    pw.set_defaults(func=cmd_watch)

    # basic
    pb = sub.add_parser("basic", help="HTTP Basic authorisation tokens")
    sub_b = pb.add_subparsers(dest="basic_cmd")
    pbe = sub_b.add_parser("encode", help="Encode username/password")
    pbe.add_argument("--username", required=True)
    pbe.add_argument("--password", required=True)
    pbe.set_defaults(func=cmd_basic_encode)
    pbd = sub_b.add_parser("decode", help="Decode a token")
    pbd.add_argument("token", help="'Basic xxx' or the bare base64 payload")
    pbd.set_defaults(func=cmd_basic_decode)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except (TwoFactorError, MalformedToken) as e:
        logger.debug("Command %s failed", args.cmd, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
