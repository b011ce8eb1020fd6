#!/usr/bin/env python3
"""
PeerLink CLI

Command-line interface for one-time file pickup over TCP.

Usage:
    peerlink start               # Run the REST API
    peerlink share FILE          # Offer a file and wait for one peer
    peerlink receive CODE        # Download the file offered on CODE
    peerlink config              # Print an example config file
"""

import asyncio
import logging
import shutil
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.logging import RichHandler

from .config import Config, load_config, EXAMPLE_CONFIG
from .exceptions import TransferError
from .sharer import FileSharer
from .transfer import receive_file

console = Console()


def setup_logging(verbose: bool = False, level_name: str = 'INFO'):
    """Configure logging with rich output."""
    level = logging.DEBUG if verbose else getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_time=False, show_path=False)]
    )


def format_size(bytes_count: int) -> str:
    """Format bytes as human-readable size."""
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if bytes_count < 1024:
            return f"{bytes_count:.1f} {unit}"
        bytes_count /= 1024
    return f"{bytes_count:.1f} PB"


@click.group()
@click.option('-v', '--verbose', is_flag=True, help='Enable verbose output')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False),
              default=None, help='JSON config file')
@click.option('--host', default=None, help='Interface transfer listeners bind on')
@click.pass_context
def cli(ctx, verbose, config_path, host):
    """PeerLink - share a file once using a numeric invite code."""
    config = load_config(Path(config_path) if config_path else None)
    if host:
        config.host = host
    setup_logging(verbose, config.log_level)
    ctx.ensure_object(dict)
    ctx.obj['config'] = config


@cli.command()
@click.option('--api-host', default=None, help='REST API host')
@click.option('--api-port', type=int, default=None, help='REST API port')
@click.pass_context
def start(ctx, api_host, api_port):
    """Run the REST API."""
    config: Config = ctx.obj['config']
    api_host = api_host or config.api_host
    api_port = api_port or config.api_port

    async def run():
        sharer = FileSharer(config)

        console.print(Panel.fit(
            f"[bold green]PeerLink API Started[/bold green]\n\n"
            f"API: [cyan]http://{api_host}:{api_port}[/cyan]\n"
            f"Upload Dir: [blue]{config.upload_dir}[/blue]",
            title="Server Info"
        ))
        console.print(f"[dim]API docs at http://localhost:{api_port}/docs[/dim]\n")

        from .api import run_api_server
        await run_api_server(sharer, host=api_host, port=api_port,
                             log_level=config.log_level.lower())

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        console.print("\n[yellow]Shutting down...[/yellow]")


@cli.command()
@click.argument('file_path', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def share(ctx, file_path):
    """Offer a file and wait until one peer has picked it up."""
    config: Config = ctx.obj['config']
    file_path = Path(file_path).resolve()

    async def run():
        sharer = FileSharer(config)
        code = sharer.offer_file(str(file_path))
        task = sharer.start_file_server(code)

        console.print(Panel.fit(
            f"[bold green]File Offered[/bold green]\n\n"
            f"Name: [cyan]{file_path.name}[/cyan]\n"
            f"Size: [yellow]{file_path.stat().st_size:,} bytes[/yellow]\n\n"
            f"[bold]Invite Code (share this):[/bold]\n"
            f"[green]{code}[/green]",
            title="Shared File"
        ))
        console.print("[dim]Waiting for a peer to connect, Ctrl+C to stop[/dim]")

        try:
            return await task
        finally:
            await sharer.shutdown()

    try:
        result = asyncio.run(run())
    except KeyboardInterrupt:
        console.print("\n[yellow]Offer withdrawn[/yellow]")
        return

    if result is not None and result.success:
        console.print(f"\n[green]✓ Sent {format_size(result.bytes_sent)} "
                      f"to {result.peer[0] if result.peer else 'peer'}[/green]")
    else:
        console.print("\n[red]✗ Transfer failed[/red]")
        ctx.exit(1)


@cli.command()
@click.argument('code', type=click.IntRange(0, 65535))
@click.option('--host', default='localhost', help='Address of the sharing peer')
@click.option('--output-dir', '-o', type=click.Path(file_okay=False),
              default='.', help='Directory to save the file in')
@click.pass_context
def receive(ctx, code, host, output_dir):
    """Download the file offered on an invite code."""
    config: Config = ctx.obj['config']
    output_dir = Path(output_dir)

    async def run():
        return await receive_file(
            host, code, output_dir,
            chunk_size=config.chunk_size,
            timeout=config.connect_timeout,
        )

    try:
        with console.status(f"Receiving from {host}:{code}..."):
            received = asyncio.run(run())
    except TransferError as e:
        console.print(f"[red]✗ {e}[/red]")
        ctx.exit(1)

    # Keep the temp name if the suggested one is taken
    target = output_dir / received.file_name
    if not target.exists():
        shutil.move(str(received.path), str(target))
    else:
        target = received.path

    console.print(f"[green]✓ Received {received.file_name} "
                  f"({format_size(received.size)}) -> {target}[/green]")


@cli.command('config')
@click.option('--save', 'save_path', type=click.Path(dir_okay=False), default=None,
              help='Write the effective config to this file')
@click.pass_context
def show_config(ctx, save_path):
    """Print an example config file, or save the effective one."""
    if save_path:
        ctx.obj['config'].save(Path(save_path))
        console.print(f"[green]Config written to {save_path}[/green]")
        return

    click.echo("Example configuration file (config.json):")
    click.echo(EXAMPLE_CONFIG)


def main():
    cli(obj={})


if __name__ == '__main__':
    main()
