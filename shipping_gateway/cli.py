"""
Command-line interface for the Shipping Gateway.
Provides commands for quoting, issuing labels and managing configuration.
"""

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

import click
import orjson
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from shipping_gateway import __version__

if TYPE_CHECKING:
    from shipping_gateway.config import GatewayConfig
    from shipping_gateway.models import ShipmentRequest

console = Console()


def _load_context(ctx) -> "GatewayConfig":
    from shipping_gateway.config import init_config
    from shipping_gateway.logging_config import setup_logging

    config = init_config(ctx.obj.get("env_file"))
    setup_logging(config, console=ctx.obj.get("verbose", False))
    return config


def _build_request(
    from_cep, to_cep, weight, length, width, height, value, service, options_file
) -> "ShipmentRequest":
    from shipping_gateway.models import ShipmentRequest

    options = {}
    if options_file:
        options = orjson.loads(Path(options_file).read_bytes())
    if service is not None:
        options["service_id"] = service

    return ShipmentRequest(
        origin_postal_code=from_cep,
        destination_postal_code=to_cep,
        weight_kg=weight,
        length_cm=length,
        width_cm=width,
        height_cm=height,
        declared_value=value,
        options=options,
    )


def shipment_options(func):
    """Options shared by commands that take a shipment."""
    decorators = [
        click.option("--from-cep", required=True, help="Origin postal code"),
        click.option("--to-cep", required=True, help="Destination postal code"),
        click.option("--weight", type=float, required=True, help="Weight in kg"),
        click.option("--length", type=float, required=True, help="Length in cm"),
        click.option("--width", type=float, required=True, help="Width in cm"),
        click.option("--height", type=float, required=True, help="Height in cm"),
        click.option("--value", type=float, default=0.0, help="Declared value"),
        click.option("--service", type=int, default=None, help="Carrier service id"),
        click.option(
            "--options-file",
            type=click.Path(exists=True),
            help="JSON file with shipment options (from, to, volumes, ...)",
        ),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


@click.group()
@click.version_option(version=__version__, prog_name="Shipping Gateway")
@click.option(
    "--config", "-c", "env_file",
    type=click.Path(exists=True),
    help="Path to configuration file",
)
@click.option("--verbose", "-v", is_flag=True, help="Log to the console")
@click.pass_context
def cli(ctx, env_file, verbose):
    """Shipping Gateway - carrier quotes and labels"""
    ctx.ensure_object(dict)
    ctx.obj["env_file"] = env_file
    ctx.obj["verbose"] = verbose


@cli.command()
@shipment_options
@click.option("--driver", "-d", default=None, help="Carrier driver (default from config)")
@click.option("--all", "all_providers", is_flag=True, help="Quote every provider")
@click.pass_context
def quote(ctx, from_cep, to_cep, weight, length, width, height, value, service,
          options_file, driver, all_providers):
    """Get freight quotes for a shipment."""
    from shipping_gateway.manager import ShippingManager

    config = _load_context(ctx)
    request = _build_request(
        from_cep, to_cep, weight, length, width, height, value, service, options_file
    )

    async def run():
        manager = ShippingManager(config)
        try:
            if all_providers:
                return await manager.get_rates_from_all_providers(request)
            name = driver or config.default_driver
            return {name: await manager.driver(name).quote(request)}
        finally:
            await manager.close()

    results = asyncio.run(run())

    table = Table(title="Quotes")
    table.add_column("Provider", style="cyan")
    table.add_column("Service", style="green")
    table.add_column("Price", justify="right")
    table.add_column("Days", justify="right")

    for provider, rates in results.items():
        for rate in rates:
            days = str(rate.estimated_days) if rate.estimated_days is not None else "-"
            table.add_row(provider, rate.service, f"{rate.price:.2f}", days)

    if not any(results.values()):
        console.print("[yellow]No quotes returned[/yellow]")
        return

    console.print(table)


@cli.command()
@shipment_options
@click.option("--driver", "-d", default=None, help="Carrier driver (default from config)")
@click.pass_context
def label(ctx, from_cep, to_cep, weight, length, width, height, value, service,
          options_file, driver):
    """Purchase and print a shipping label."""
    from shipping_gateway.errors import ShippingError
    from shipping_gateway.manager import ShippingManager

    config = _load_context(ctx)
    request = _build_request(
        from_cep, to_cep, weight, length, width, height, value, service, options_file
    )

    async def run():
        manager = ShippingManager(config)
        try:
            return await manager.driver(driver).issue_label(request)
        finally:
            await manager.close()

    try:
        result = asyncio.run(run())
    except ShippingError as e:
        stage = f" at {e.stage}" if e.stage else ""
        console.print(f"[red]✗ Label issuance failed{stage}: {e}[/red]")
        raise SystemExit(1)

    console.print(Panel.fit(
        f"Tracking code: [bold]{result.tracking_code or '[dim]pending[/dim]'}[/bold]\n"
        f"Label URL: {result.label_url or '[dim]none[/dim]'}",
        title=f"[green]Label issued ({result.provider})[/green]",
    ))


@cli.command()
@click.pass_context
def status(ctx):
    """Show gateway configuration."""
    from shipping_gateway.config import GatewayConfig

    config = GatewayConfig.from_env(ctx.obj.get("env_file"))
    me = config.melhor_envio

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Default Driver", config.default_driver)
    table.add_row("Melhor Envio URI", me.effective_base_uri)
    table.add_row("Sandbox", str(me.use_sandbox))
    table.add_row("Token", "set" if me.token else "[dim]Not set[/dim]")
    table.add_row("Timeout", f"{me.timeout}s")
    table.add_row("Order Lookup Delay", f"{me.order_lookup_delay}s")
    table.add_row("Retries", f"{me.max_retry_attempts} x {me.retry_delay_seconds}s")
    table.add_row("Correios URI", config.correios.base_uri)
    table.add_row("Log File", config.log_file or "[dim]Not set[/dim]")

    console.print(table)

    for error in config.validate():
        console.print(f"[yellow]! {error}[/yellow]")


@cli.command()
@click.argument("config_path", type=click.Path())
def init(config_path):
    """Initialize configuration file."""
    config_path = Path(config_path)

    if config_path.exists():
        if not click.confirm(f"{config_path} already exists. Overwrite?"):
            return

    template = '''# Shipping Gateway Configuration

SHIPPING_DEFAULT_DRIVER=melhor_envio

# Melhor Envio
MELHOR_ENVIO_TOKEN=your-token-here
MELHOR_ENVIO_BASE_URI=https://www.melhorenvio.com.br/api/v2/
MELHOR_ENVIO_SANDBOX_BASE_URI=https://sandbox.melhorenvio.com.br/api/v2/
MELHOR_ENVIO_USE_SANDBOX=false
MELHOR_ENVIO_TIMEOUT=10
MELHOR_ENVIO_ORDER_LOOKUP_DELAY=3
MELHOR_ENVIO_MAX_RETRY_ATTEMPTS=3
MELHOR_ENVIO_RETRY_DELAY_SECONDS=2

# Correios
CORREIOS_TOKEN=
CORREIOS_BASE_URI=https://api.correios.com.br/
CORREIOS_TIMEOUT=10

# Logging
LOG_LEVEL=INFO
LOG_FILE=
'''

    config_path.write_text(template, encoding='utf-8')
    console.print(f"[green]✓ Configuration file created: {config_path}[/green]")
    console.print("\nEdit this file with your settings, then run:")
    console.print(f"  shipping-gateway --config {config_path} status")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
