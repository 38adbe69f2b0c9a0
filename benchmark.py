#!/usr/bin/env python3
"""Benchmark Israel Post lookups, uncached vs cached.

Usage:
    python benchmark.py                              # 10 network + 5 cached lookups
    python benchmark.py --iterations 20 --cached 10
    python benchmark.py --city "ירושלים" --street "הרצל" --house 10

Talks to the real upstream; expect bot-protection errors from some networks.
"""

import argparse
import asyncio
import time
import tracemalloc
from dataclasses import dataclass, field

from dotenv import load_dotenv

# Load .env BEFORE importing config
load_dotenv()

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from mikud.cache import LookupCache
from mikud.config import Config
from mikud.models import Address
from mikud.service import LookupService

console = Console()


@dataclass
class Metrics:
    network: list[float] = field(default_factory=list)
    cached: list[float] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    total: int = 0


def format_bytes(size: float) -> str:
    for unit in ("Bytes", "KB", "MB", "GB"):
        if abs(size) < 1024 or unit == "GB":
            return f"{size:.2f} {unit}" if unit != "Bytes" else f"{size:.0f} {unit}"
        size /= 1024


async def timed_lookup(service: LookupService, address: Address, metrics: Metrics, bucket: list[float], label: str):
    """Run one lookup and record its latency in ms."""
    start = time.perf_counter()
    result = await service.lookup(address)
    duration = (time.perf_counter() - start) * 1000
    metrics.total += 1

    if result.success:
        bucket.append(duration)
        suffix = " (cached)" if result.cached else ""
        console.print(f"  [green]✓[/green] {label}: {result.zipcode} in {duration:.2f}ms{suffix}")
    else:
        metrics.errors.append(result.error.kind.value)
        console.print(f"  [red]✗[/red] {label}: {result.error.message}")


def stats_row(table: Table, name: str, durations: list[float]):
    if not durations:
        table.add_row(name, "0", "-", "-", "-")
        return
    table.add_row(
        name,
        str(len(durations)),
        f"{sum(durations) / len(durations):.2f}ms",
        f"{min(durations):.2f}ms",
        f"{max(durations):.2f}ms",
    )


async def run_benchmark(address: Address, iterations: int, cached_iterations: int, delay: float):
    metrics = Metrics()
    tracemalloc.start()
    start_mem, _ = tracemalloc.get_traced_memory()

    console.print(Panel.fit(
        f"[bold cyan]Mikud Performance Benchmark[/bold cyan]\n"
        f"{address.street} {address.house_number or ''}, {address.city}",
        border_style="cyan",
    ))

    # Cache disabled so every call goes upstream
    console.print(f"\n[bold]Network requests ({iterations})[/bold]")
    async with LookupService(Config(enable_cache=False)) as service:
        for i in range(1, iterations + 1):
            await timed_lookup(service, address, metrics, metrics.network, f"Request {i}")
            # Small delay to avoid overwhelming the server
            await asyncio.sleep(delay)

    console.print(f"\n[bold]Cached requests ({cached_iterations})[/bold]")
    cfg = Config()
    async with LookupService(cfg, cache=LookupCache(**cfg.get_cache_config())) as service:
        primed = await service.lookup(address)
        if not primed.success:
            console.print(f"  [yellow]⚠ Could not prime cache: {primed.error.message}[/yellow]")
        for i in range(1, cached_iterations + 1):
            await timed_lookup(service, address, metrics, metrics.cached, f"Request {i}")

    end_mem, peak_mem = tracemalloc.get_traced_memory()
    tracemalloc.stop()

    table = Table(title="Latency")
    table.add_column("Kind", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Average", justify="right")
    table.add_column("Min", justify="right")
    table.add_column("Max", justify="right")
    stats_row(table, "Network", metrics.network)
    stats_row(table, "Cached", metrics.cached)
    console.print()
    console.print(table)

    if metrics.network and metrics.cached:
        speedup = (sum(metrics.network) / len(metrics.network)) / (sum(metrics.cached) / len(metrics.cached))
        console.print(f"[green]Cache speedup: {speedup:.1f}x[/green]")

    successful = metrics.total - len(metrics.errors)
    pct = successful / metrics.total * 100 if metrics.total else 0
    color = "green" if pct >= 80 else "yellow" if pct >= 50 else "red"
    delta = end_mem - start_mem
    console.print(Panel.fit(
        f"Total requests: {metrics.total}\n"
        f"Successful: {successful}\n"
        f"Errors: {len(metrics.errors)} {sorted(set(metrics.errors)) if metrics.errors else ''}\n"
        f"[{color}]Success rate: {pct:.1f}%[/{color}]\n"
        f"Memory delta: {format_bytes(delta)} (peak {format_bytes(peak_mem)})\n"
        f"Memory per request: {format_bytes(delta / metrics.total if metrics.total else 0)}",
        title="Summary",
        border_style="blue",
    ))


def main():
    parser = argparse.ArgumentParser(description="Benchmark Israel Post zipcode lookups")
    parser.add_argument("--iterations", type=int, default=10, help="Uncached lookups to run")
    parser.add_argument("--cached", type=int, default=5, help="Cached lookups to run")
    parser.add_argument("--delay", type=float, default=0.1, help="Seconds between uncached lookups")
    parser.add_argument("--city", default="תל אביב")
    parser.add_argument("--street", default="פרישמן")
    parser.add_argument("--house", default="7")
    parser.add_argument("--entrance", default="1")
    args = parser.parse_args()

    address = Address(city=args.city, street=args.street, house_number=args.house, entrance=args.entrance)
    asyncio.run(run_benchmark(address, args.iterations, args.cached, args.delay))


if __name__ == "__main__":
    main()
