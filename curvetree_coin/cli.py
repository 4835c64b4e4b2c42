"""
Command-Line Interface for the curvetree-coin toolkit

Provides commands to inspect the curve cycle, mint a coin with a range proof,
and run a full mint -> accumulate -> spend round trip.
"""

import logging
import sys
import time

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from curvetree_coin import __version__, print_disclaimer
from curvetree_coin.protocol.coin import (
    PublicKey,
    SpendingInfo,
    create_mint_proof,
    create_spend_proof,
    generate_keypair,
    verify_mint_proof,
    verify_spend_proof,
)
from curvetree_coin.protocol.config import (
    DEFAULT_BRANCHING_FACTOR,
    DEFAULT_GENERATOR_CAPACITY,
    DEFAULT_TREE_DEPTH,
    RANGE_PROOF_BITS,
)
from curvetree_coin.protocol.curve_tree import CurveTree, SelRerandParameters
from curvetree_coin.protocol.exceptions import PrivacyProtocolError

console = Console()


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


def _fail(error: Exception, verbose: bool) -> None:
    click.echo(click.style(f"\n✗ Error: {error}", fg="red"), err=True)
    if verbose:
        console.print_exception()
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', is_flag=True, help='Enable debug logging')
@click.pass_context
def main(ctx, verbose):
    """
    curvetree-coin - Proof of Concept

    Privacy-preserving coins over a curve-tree accumulator on the
    Pallas/Vesta cycle.

    ⚠️  PROOF OF CONCEPT - NOT PRODUCTION READY
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _configure_logging(verbose)


@main.command()
def params():
    """Show the curve cycle and protocol parameters."""
    params = SelRerandParameters.new()
    pair = params.curve_pair

    table = Table(title="Curve cycle")
    table.add_column("Role")
    table.add_column("Curve")
    table.add_column("Base field p")
    table.add_column("Group order")
    for role, curve in (("even (P0)", pair.even), ("odd (P1)", pair.odd)):
        table.add_row(role, curve.name, hex(curve.p), hex(curve.order))
    console.print(table)

    console.print(f"Equation: y^2 = x^3 + {pair.even.a}x + {pair.even.b}")
    console.print(f"Range proof bits: {RANGE_PROOF_BITS}")
    console.print(f"Generator capacity: {DEFAULT_GENERATOR_CAPACITY}")
    for layer in (params.even_parameters, params.odd_parameters):
        uh = layer.universal_hash
        console.print(f"Universal hash ({layer.curve.name}): alpha={hex(uh.alpha)} beta={hex(uh.beta)}")


@main.command()
@click.option('--value', type=int, required=True, help='Coin value in [0, 2^64)')
@click.pass_context
def mint(ctx, value):
    """
    Mint a coin, prove its value is in range and verify the proof.

    Examples:

        curvetree-coin mint --value 42
    """
    verbose = ctx.obj["verbose"]
    try:
        params = SelRerandParameters.new()
        _, pk = generate_keypair(params)

        start = time.perf_counter()
        _, output, proof = create_mint_proof(value, pk, params)
        prove_time = time.perf_counter() - start

        start = time.perf_counter()
        verify_mint_proof(proof, params)
        verify_time = time.perf_counter() - start

        console.print(f"Value commitment: {output.value_commitment.to_bytes().hex()}")
        console.print(f"Randomized public key: {output.public_key.to_bytes().hex()}")
        console.print(f"Proof size: {len(proof.serialize())} bytes")
        console.print(f"Prove: {prove_time:.2f}s  Verify: {verify_time:.2f}s")
        click.echo(click.style("✓ Mint proof verified", fg="green"))
    except PrivacyProtocolError as e:
        _fail(e, verbose)


@main.command()
@click.option('--value', type=int, default=100, help='Coin value (default: 100)')
@click.option(
    '--branching',
    type=int,
    default=DEFAULT_BRANCHING_FACTOR,
    help=f'Children per tree node (default: {DEFAULT_BRANCHING_FACTOR})'
)
@click.option(
    '--depth',
    type=int,
    default=DEFAULT_TREE_DEPTH,
    help=f'Tree depth (default: {DEFAULT_TREE_DEPTH})'
)
@click.pass_context
def demo(ctx, value, branching, depth):
    """
    Run mint, combine, accumulate, spend and verify end to end.

    Examples:

        curvetree-coin demo --value 7 --branching 2 --depth 2
    """
    verbose = ctx.obj["verbose"]
    timings = []

    def timed(label, fn, *args):
        start = time.perf_counter()
        result = fn(*args)
        timings.append((label, time.perf_counter() - start))
        return result

    try:
        params = SelRerandParameters.new()
        sk, pk = timed("keygen", generate_keypair, params)
        coin, output, mint_proof = timed("mint proof", create_mint_proof, value, pk, params)
        timed("mint verify", verify_mint_proof, mint_proof, params)

        permissible = timed("combine", output.combine_into_permissible, params)
        tree = timed(
            "tree build", CurveTree, [permissible.permissible_coin], params, branching, depth
        )

        info = SpendingInfo(
            index=0,
            coin=coin,
            minting_output=output,
            permissible_coin=permissible,
            randomized_pk=PublicKey(output.public_key),
            sk=sk,
        )
        spend_proof = timed("spend proof", create_spend_proof, info, params, tree)
        timed(
            "spend verify", verify_spend_proof, spend_proof, params, tree.root, branching, depth
        )
    except PrivacyProtocolError as e:
        _fail(e, verbose)
        return

    table = Table(title="curvetree-coin demo")
    table.add_column("Step")
    table.add_column("Seconds", justify="right")
    for label, seconds in timings:
        table.add_row(label, f"{seconds:.3f}")
    console.print(table)
    console.print(f"Spending tag: {spend_proof.tag_bytes.hex()}")
    click.echo(click.style("✓ Spend proof verified", fg="green"))


@main.command()
def version():
    """Show version and disclaimer information."""
    click.echo(f"\ncurvetree-coin v{__version__}")
    click.echo("Proof of Concept - Not Production Ready\n")
    print_disclaimer()


if __name__ == "__main__":
    main()
