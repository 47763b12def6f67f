"""Command line entry points.

    padbreak-scheme {encrypt,decrypt} -k KEY -i IN -o OUT
    padbreak-oracle [-k KEY] -i IN
    padbreak-attack -i IN -o OUT [--decimal] [--oracle CMD]
    padbreak-hex [--from-hex] -i IN -o OUT

Each of them can also be run as `python -m padbreak.cli <scheme|oracle|attack|hex> ...`.
"""
import argparse
import logging
import os
import sys

from padbreak.attacks.padding import decrypt as attack, strip_recovered
from padbreak.codec import Encoding, encode, decode
from padbreak.errors import PaddingOracleError, BadMAC, BadPadding, DecodeError
from padbreak.oracles import ProcessOracle, scheme_verdict
from padbreak.scheme import Key, encrypt, decrypt

log = logging.getLogger('padbreak')

KEY_ENV = 'PADBREAK_KEY'


def _add_logging_args(parser):
    group = parser.add_mutually_exclusive_group()
    group.add_argument('-v', '--verbose', action='store_true', help='Log debug output')
    group.add_argument('-q', '--quiet', action='store_true', help='Only log warnings and errors')


def _setup_logging(args):
    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING

    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s', stream=sys.stderr)


def _read(path):
    with open(path, 'rb') as f:
        return f.read()


def _write(path, data, mode='w'):
    with open(path, mode) as f:
        f.write(data)


def _key(text):
    try:
        return Key.from_hex(text)
    except PaddingOracleError as e:
        raise argparse.ArgumentTypeError(str(e))


def scheme_main(argv=None):
    parser = argparse.ArgumentParser(
        prog='padbreak-scheme',
        description='Encrypt or decrypt a hex encoded file with AES-CBC and HMAC-SHA256. Output is always hex.'
    )
    parser.add_argument('mode', choices=['encrypt', 'decrypt'])
    parser.add_argument('-k', '--key', required=True, type=_key, help='32 byte key as 64 hex characters')
    parser.add_argument('-i', '--input', required=True, help='Input file (hex)')
    parser.add_argument('-o', '--output', required=True, help='Output file')
    _add_logging_args(parser)
    args = parser.parse_args(argv)
    _setup_logging(args)

    try:
        data = _read(args.input).strip()
    except OSError as e:
        log.error("%s does not exist or is not readable: %s", args.input, e)
        return 1

    if len(data) % 2 != 0:
        log.error("Invalid input file: octet representation only.")
        return 1

    try:
        data = decode(data, Encoding.HEX)
        if args.mode == 'encrypt':
            output = encrypt(data, args.key)
        else:
            output = decrypt(data, args.key)
    except (BadPadding, BadMAC) as e:
        log.error("%s", e)
        return 1
    except PaddingOracleError as e:
        log.error("Invalid input file: %s", e)
        return 1

    _write(args.output, encode(output))
    return 0


def oracle_main(argv=None):
    parser = argparse.ArgumentParser(
        prog='padbreak-oracle',
        description='Decrypt a candidate ciphertext and report SUCCESS, INVALID PADDING or INVALID MAC.'
    )
    parser.add_argument('-k', '--key', type=_key, default=None,
                        help=f'32 byte key as 64 hex characters. Read from ${KEY_ENV} if omitted')
    parser.add_argument('-i', '--input', required=True, help='Candidate file, hex or decimal octets')
    parser.add_argument('--coalesce-mac', action='store_true', help='Report MAC failures as SUCCESS')
    _add_logging_args(parser)
    args = parser.parse_args(argv)
    _setup_logging(args)

    key = args.key
    if key is None:
        if KEY_ENV not in os.environ:
            parser.error(f"no key given, use -k or set ${KEY_ENV}")
        try:
            key = _key(os.environ[KEY_ENV])
        except argparse.ArgumentTypeError as e:
            parser.error(f"${KEY_ENV}: {e}")

    try:
        msg = decode(_read(args.input))
        verdict = scheme_verdict(msg, key, distinguish_mac=not args.coalesce_mac)
    except OSError as e:
        log.error("Could not read %s: %s", args.input, e)
        return 1
    except PaddingOracleError as e:
        log.error("Invalid candidate: %s", e)
        return 1

    sys.stdout.write(verdict.value)
    sys.stdout.flush()
    return 0


def attack_main(argv=None):
    parser = argparse.ArgumentParser(
        prog='padbreak-attack',
        description='Recover the plaintext of a ciphertext by querying a padding oracle program.'
    )
    parser.add_argument('-i', '--input', default='ciphertext.txt', help='Ciphertext file, hex or decimal octets (default: %(default)s)')
    parser.add_argument('-o', '--output', default='restored-plaintext.txt', help='Output file (default: %(default)s)')
    parser.add_argument('--oracle', default='padbreak-oracle', help='Oracle command, invoked as `<CMD> -i <candidate file>` (default: %(default)s)')
    parser.add_argument('--decimal', action='store_true', help='The oracle expects decimal octets instead of hex')
    parser.add_argument('--timeout', type=float, default=None, help='Seconds to wait for a single oracle answer')
    parser.add_argument('--keep-padding', action='store_true', help='Write the recovered message including tag and padding')
    parser.add_argument('--no-disambiguate', action='store_true', help='Take the first hit for the last byte of each block')
    _add_logging_args(parser)
    args = parser.parse_args(argv)
    _setup_logging(args)

    encoding = Encoding.DECIMAL if args.decimal else Encoding.HEX

    try:
        msg = decode(_read(args.input))
    except OSError as e:
        log.error("input file %s does not exist: %s", args.input, e)
        return 1
    except DecodeError as e:
        log.error("Invalid input file: %s", e)
        return 1

    # the child process is killed once the timeout expires
    oracle = ProcessOracle(args.oracle, encoding=encoding, timeout=args.timeout)
    try:
        padded = attack(oracle, msg, disambiguate=not args.no_disambiguate)
    except PaddingOracleError as e:
        log.error("Attack failed: %s", e)
        return 1

    log.info("Done after %d oracle queries", oracle.queries)

    result = padded if args.keep_padding else strip_recovered(padded)
    _write(args.output, encode(result, encoding))
    return 0


def hex_main(argv=None):
    parser = argparse.ArgumentParser(
        prog='padbreak-hex',
        description='Convert a readable file to hex, or a hex file back to readable text.'
    )
    parser.add_argument('--from-hex', action='store_true', help='Decode hex input instead of encoding to hex')
    parser.add_argument('-i', '--input', default='input.txt', help='Input file (default: %(default)s)')
    parser.add_argument('-o', '--output', default='plaintext.txt', help='Output file (default: %(default)s)')
    _add_logging_args(parser)
    args = parser.parse_args(argv)
    _setup_logging(args)

    try:
        data = _read(args.input)
    except OSError:
        log.error("%s does not exist!", args.input)
        return 1

    try:
        if args.from_hex:
            _write(args.output, decode(data, Encoding.HEX), 'wb')
        else:
            _write(args.output, encode(data))
    except DecodeError as e:
        log.error("%s", e)
        return 1

    return 0


COMMANDS = {
    'scheme': scheme_main,
    'oracle': oracle_main,
    'attack': attack_main,
    'hex': hex_main,
}


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]

    if not argv or argv[0] not in COMMANDS:
        print(f"Usage: {sys.argv[0]} <{'|'.join(COMMANDS)}> [ARGS]")
        return 1

    return COMMANDS[argv[0]](argv[1:])


if __name__ == '__main__':
    sys.exit(main())
