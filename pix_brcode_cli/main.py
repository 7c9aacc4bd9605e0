"""
pix-brcode CLI entry point.

Thin shell over the codec: build, read and check BR Code payloads from a terminal.
"""
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from pix_brcode.brcode.context import make_merchant
from pix_brcode.brcode.decoder import decode_pix_payload
from pix_brcode.brcode.encoder import encode_pix_payload
from pix_brcode.utils.enumerators import LogLevel, PixKeyType, PointOfInitiation
from pix_brcode.utils.logs import setup_logger_json
from pix_brcode.utils.pix_errors import PixCodecException
from pix_brcode.utils.reference import generate_reference_id
from pix_brcode.utils.validate_keys import format_pix_key, mask_pix_key, validate_pix_key

app = typer.Typer(
    name="pix-brcode",
    help="Encode, decode and validate Pix BR Code payloads",
    add_completion=False,
)

console = Console()


@app.callback()
def main(
    log_level: LogLevel = typer.Option(LogLevel.WARNING, "--log-level", case_sensitive=False, help="Log level"),
):
    # codec modules log under pix_brcode.brcode.*
    setup_logger_json(log_level.value, "brcode")


@app.command()
def version():
    """Show the current version of the pix-brcode CLI."""
    from pix_brcode_cli import __version__
    console.print(f"pix-brcode CLI v{__version__}", style="bold green")


@app.command()
def encode(
    name: str = typer.Option(..., "--name", help="Payee name (normalized, max 25 chars)"),
    city: str = typer.Option(..., "--city", help="Payee city"),
    pix_key: str = typer.Option(..., "--key", help="Payee Pix key"),
    key_type: PixKeyType = typer.Option(..., "--key-type", case_sensitive=False, help="Type of the Pix key"),
    amount: Optional[str] = typer.Option(None, "--amount", help="Amount in BRL, e.g. 25.50"),
    reference: Optional[str] = typer.Option(None, "--reference", help="Reference label, '***' when omitted"),
    description: Optional[str] = typer.Option(None, "--description", help="Free text shown to the payer"),
    single_use: bool = typer.Option(False, "--single-use", help="Mark the code as single use (12)"),
):
    """Print the BR Code payload for a payee."""
    try:
        merchant = make_merchant(name=name, city=city, pix_key=pix_key, pix_key_type=key_type)
        payload = encode_pix_payload(
            merchant,
            amount,
            reference,
            point_of_initiation=PointOfInitiation.SINGLE_USE if single_use else PointOfInitiation.REUSABLE,
            description=description,
        )
    except PixCodecException as e:
        console.print(f"❌ Encoding failed: {e.message}", style="bold red")
        raise typer.Exit(code=1)
    typer.echo(payload)


@app.command()
def decode(
    payload: str = typer.Argument(..., help="BR Code payload (Pix copia e cola)"),
):
    """Decode a payload and verify its CRC."""
    try:
        decoded = decode_pix_payload(payload)
    except PixCodecException as e:
        where = f" (tag {e.tag})" if e.tag else ""
        console.print(f"❌ Invalid payload{where}: {e.message}", style="bold red")
        raise typer.Exit(code=1)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Field", style="dim")
    table.add_column("Value")
    rows = [
        ("QR type", decoded.qr_type.value),
        ("Pix key", decoded.pix_key or "-"),
        ("Location URL", decoded.location_url or "-"),
        ("Description", decoded.description or "-"),
        ("Amount", str(decoded.transaction_amount) if decoded.transaction_amount is not None else "-"),
        ("Merchant name", decoded.merchant_name),
        ("Merchant city", decoded.merchant_city),
        ("Reference", decoded.reference_label or "-"),
        ("CRC", decoded.crc),
    ]
    for field_name, value in rows:
        table.add_row(field_name, value)
    console.print(table)
    console.print("✅ CRC ok", style="bold green")


@app.command(name="validate-key")
def validate_key(
    pix_key: str = typer.Argument(..., help="Pix key to check"),
    key_type: PixKeyType = typer.Option(..., "--key-type", case_sensitive=False, help="Type of the Pix key"),
):
    """Check a Pix key and show its display and masked forms."""
    if not validate_pix_key(pix_key, key_type):
        console.print(f"❌ Invalid {key_type.value} key", style="bold red")
        raise typer.Exit(code=1)
    console.print(f"✅ Valid {key_type.value} key", style="bold green")
    console.print(f"   Formatted: {format_pix_key(pix_key, key_type)}")
    console.print(f"   Masked:    {mask_pix_key(pix_key, key_type)}")


@app.command()
def reference(
    prefix: str = typer.Option("REF", "--prefix", help="Reference prefix"),
):
    """Print a fresh reference id."""
    typer.echo(generate_reference_id(prefix))


# This allows the package to be run as `python -m pix_brcode_cli.main`
if __name__ == "__main__":
    app()
