"""Main entry point: python -m lamport_forge"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from lamport_forge import __version__
from lamport_forge.analysis.coverage import CoverageState, build_coverage
from lamport_forge.analysis.difficulty import (
    estimate_difficulty,
    expected_attempts,
    success_probability,
    unreachable_positions,
)
from lamport_forge.core.blocks import (
    PrivateKey,
    PublicKey,
    Signature,
    message_from_string,
)
from lamport_forge.core.keygen import generate_key
from lamport_forge.core.signing import sign, verify
from lamport_forge.forge.search import ForgeSearch
from lamport_forge.utils.constants import DEFAULT_BATCH_SIZE, DEFAULT_PREFIX, DEFAULT_WORKERS
from lamport_forge.utils.errors import LamportError
from lamport_forge.utils.types import ForgeResult, SearchConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lamport-forge",
        description="Lamport one-time signatures and the key-reuse forgery attack",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command")

    # keygen
    kg = sub.add_parser("keygen", help="Generate a one-time key pair")
    kg.add_argument("--out", type=str, default="lamport", help="Output prefix (<out>.key, <out>.pub)")

    # sign
    sg = sub.add_parser("sign", help="Sign a message string")
    sg.add_argument("--key", type=str, required=True, help="Private key hex file")
    sg.add_argument("--message", type=str, required=True, help="Message string")
    sg.add_argument("--out", type=str, help="Write signature hex here instead of stdout")

    # verify
    vf = sub.add_parser("verify", help="Verify a signature on a message string")
    vf.add_argument("--pub", type=str, required=True, help="Public key hex file")
    vf.add_argument("--message", type=str, required=True, help="Message string")
    vf.add_argument("--sig", type=str, required=True, help="Signature hex file")

    # forge
    fg = sub.add_parser("forge", help="Forge a signature from reused-key signatures")
    fg.add_argument("--pub", type=str, required=True, help="Public key hex file")
    fg.add_argument("--sig", type=str, action="append", required=True,
                    help="Observed signature hex file (repeatable)")
    fg.add_argument("--message", type=str, action="append", default=[],
                    help="Message string of each --sig, in order (optional, for checking)")
    fg.add_argument("--out", type=str, help="Write forged signature hex here")
    _add_search_args(fg)

    # demo
    dm = sub.add_parser("demo", help="Generate a key, sign N messages, forge an N+1th")
    dm.add_argument("--count", type=int, default=8, help="Messages to sign (\"1\"..\"N\", default 8)")
    _add_search_args(dm)

    return parser


def _add_search_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--prefix", type=str, default=DEFAULT_PREFIX, help="Candidate prefix")
    p.add_argument("--start", type=int, default=0, help="First candidate counter")
    p.add_argument("--workers", type=int, default=DEFAULT_WORKERS, help="Worker count")
    p.add_argument("--batch-size", type=int, default=DEFAULT_BATCH_SIZE, help="Candidates per batch")
    p.add_argument("--max-attempts", type=int, default=None, help="Candidate budget (default unbounded)")
    p.add_argument("--timeout", type=float, default=None, help="Give up after this many seconds")
    p.add_argument("--threads", action="store_true", help="Use worker threads instead of processes")


def search_config(args: argparse.Namespace) -> SearchConfig:
    return SearchConfig(
        prefix=args.prefix,
        start=args.start,
        workers=args.workers,
        batch_size=args.batch_size,
        max_attempts=args.max_attempts,
        timeout=args.timeout,
        use_processes=not args.threads,
    )


def read_hex(path: str) -> str:
    return Path(path).read_text().strip()


def write_hex(path: str, text: str) -> None:
    Path(path).write_text(text + "\n")
    print(f"Wrote {path}")


def run_keygen(args: argparse.Namespace) -> None:
    private_key, public_key = generate_key()
    write_hex(f"{args.out}.key", private_key.to_hex())
    write_hex(f"{args.out}.pub", public_key.to_hex())


def run_sign(args: argparse.Namespace) -> None:
    private_key = PrivateKey.from_hex(read_hex(args.key))
    signature = sign(message_from_string(args.message), private_key)
    if args.out:
        write_hex(args.out, signature.to_hex())
    else:
        print(signature.to_hex())


def run_verify(args: argparse.Namespace) -> int:
    public_key = PublicKey.from_hex(read_hex(args.pub))
    signature = Signature.from_hex(read_hex(args.sig))
    ok = verify(message_from_string(args.message), public_key, signature)
    print(f"Verify worked? {ok}")
    return 0 if ok else 1


def print_coverage(coverage: CoverageState) -> None:
    difficulty = estimate_difficulty(coverage)
    unreachable = unreachable_positions(coverage)
    print(f"Zero taken: {coverage.zero_used.hex()}")
    print(f"One taken:  {coverage.one_used.hex()}")
    print(f"Signatures: {coverage.n_signatures}")
    print(f"Covered both / one side / neither: "
          f"{coverage.covered_both()} / {coverage.covered_one_side()} / {coverage.covered_neither()}")
    print(f"Difficulty: 2^{difficulty} (~{expected_attempts(difficulty):.3g} candidates)")
    if unreachable:
        print(f"Unreachable bits: {len(unreachable)} -- no message can be forged")


def print_result(result: ForgeResult, public_key: PublicKey) -> None:
    print()
    print("=" * 50)
    print(" FORGERY")
    print("=" * 50)
    print(f"  Forged message:      {result.candidate}")
    print(f"  Digest:              {result.message.hex()}")
    print(f"  Attempts:            {result.attempts:,}")
    print(f"  Elapsed:             {result.elapsed:.2f} s")
    print(f"  Verifies:            {verify(result.message, public_key, result.signature)}")
    print("=" * 50)


def run_forge(args: argparse.Namespace) -> None:
    public_key = PublicKey.from_hex(read_hex(args.pub))
    signatures = [Signature.from_hex(read_hex(p)) for p in args.sig]
    if args.message and len(args.message) != len(signatures):
        raise ValueError(
            f"Got {len(args.message)} --message values for {len(signatures)} --sig files"
        )

    for i, (text, signature) in enumerate(zip(args.message, signatures), start=1):
        print(f"ok {i}: {verify(message_from_string(text), public_key, signature)}")

    coverage = build_coverage(public_key, signatures)
    print_coverage(coverage)

    config = search_config(args)
    if config.max_attempts is not None:
        p = success_probability(estimate_difficulty(coverage), config.max_attempts)
        print(f"Chance of success within budget: {p:.4f}")

    result = ForgeSearch(coverage, config).run()
    print_result(result, public_key)
    if args.out:
        write_hex(args.out, result.signature.to_hex())
    else:
        print(result.signature.to_hex())


def run_demo(args: argparse.Namespace) -> None:
    """Full pipeline: keygen -> sign N messages -> coverage -> forge -> verify."""
    print("Generating key pair...")
    private_key, public_key = generate_key()

    texts = [str(i) for i in range(1, args.count + 1)]
    signatures = [sign(message_from_string(t), private_key) for t in texts]
    for i, (text, signature) in enumerate(zip(texts, signatures), start=1):
        print(f"ok {i}: {verify(message_from_string(text), public_key, signature)}")

    coverage = build_coverage(public_key, signatures)
    print_coverage(coverage)

    print("Searching for a forgeable message...")
    result = ForgeSearch(coverage, search_config(args)).run()
    print_result(result, public_key)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    commands = {
        "keygen": run_keygen,
        "sign": run_sign,
        "verify": run_verify,
        "forge": run_forge,
        "demo": run_demo,
    }
    if args.command not in commands:
        parser.print_help()
        return 0

    try:
        return commands[args.command](args) or 0
    except (LamportError, ValueError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
