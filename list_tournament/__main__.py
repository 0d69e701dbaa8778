"""
CLI entry point for the list tournament engine.

Parses arguments, wires the store and engine, and prints results as tables.
"""

import argparse
import json
import sys
from argparse import Namespace
from datetime import datetime, timezone
from pathlib import Path

from prettytable import PrettyTable

from .config import DAY_SECONDS, EngineConfig
from .engine import ListEngine
from .exceptions import ListNotFound, ListTournamentError
from .history import HistoryAggregator
from .logging_config import get_logger, setup_logging
from .models import Item, TournamentState
from .serialization import list_from_state
from .storage.jsonl_storage import JSONListStore
from .tournament.scheduler import pending_matches


def parse_args(argv: list[str] | None = None) -> Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="List Tournament - rank list items with queries and elimination brackets"
    )
    _ = parser.add_argument(
        "--store-dir",
        required=True,
        help="Directory of the JSON list store"
    )
    _ = parser.add_argument(
        "--k-factor",
        type=float,
        default=32.0,
        help="Elo K constant (default: 32)"
    )
    _ = parser.add_argument(
        "--score-floor",
        type=float,
        default=0.0,
        help="Lowest score a rating update can produce (default: 0)"
    )
    _ = parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    _ = parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Set logging level (default: WARNING)"
    )

    _ = parser.add_argument(
        "--log-file",
        default=None,
        help="Also write logs to this file (rotated at 10 MB)"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    import_cmd = commands.add_parser("import", help="Import or merge a list from a JSON file")
    _ = import_cmd.add_argument("file", help="Path to a list JSON file")

    query_cmd = commands.add_parser("query", help="Filter and sort a stored list")
    _ = query_cmd.add_argument("list_id", help="Id of the stored list")
    _ = query_cmd.add_argument(
        "--query",
        default=None,
        help="Query text (default: the list's stored query)"
    )
    _ = query_cmd.add_argument(
        "--save",
        action="store_true",
        help="Store the query on the list"
    )

    simulate_cmd = commands.add_parser(
        "simulate", help="Run a bracket where the higher score wins each match"
    )
    _ = simulate_cmd.add_argument("list_id", help="Id of the stored list")

    history_cmd = commands.add_parser("history", help="Show the time-weighted score series of an item")
    _ = history_cmd.add_argument("item_id", help="Item id")
    _ = history_cmd.add_argument(
        "--half-life-days",
        type=float,
        default=7.0,
        help="Decay half-life in days (default: 7)"
    )

    return parser.parse_args(argv)


def items_table(items: list[Item]) -> PrettyTable:
    table = PrettyTable()
    table.field_names = ["#", "Id", "Name", "Score", "Rank", "W-L"]
    table.align["#"] = "r"
    table.align["Score"] = "r"
    table.align["Rank"] = "r"
    for i, item in enumerate(items, 1):
        table.add_row([
            i,
            item.id,
            item.name,
            f"{item.score:.1f}",
            item.rank if item.rank is not None else "",
            f"{item.wins}-{item.losses}",
        ])
    return table


def run_import(store: JSONListStore, engine: ListEngine, path: Path) -> None:
    logger = get_logger("import")
    with open(path, "r", encoding="utf-8") as f:
        incoming = list_from_state(json.load(f))

    try:
        stored = store.get_list(incoming.id)
    except ListNotFound:
        version = store.save_list(incoming, 0)
        logger.info(f"Imported new list {incoming.id} with {len(incoming.items)} items")
        print(f"Imported list {incoming.id} ({len(incoming.items)} items), version {version}")
        return

    merged = engine.merge_import(stored, incoming.items, stored.version)
    version = store.save_list(merged, stored.version)
    print(f"Merged into list {stored.id} ({len(merged.items)} items), version {version}")


def run_query(store: JSONListStore, engine: ListEngine, list_id: str, query: str | None, save: bool) -> None:
    item_list = store.get_list(list_id)
    items = engine.evaluate(item_list, query)
    print(items_table(items))
    if save and query is not None:
        updated = engine.set_query(item_list, query, item_list.version)
        version = store.save_list(updated, item_list.version)
        print(f"Saved query on list {list_id}, version {version}")


def run_simulation(store: JSONListStore, engine: ListEngine, list_id: str) -> None:
    logger = get_logger("simulate")
    item_list = store.get_list(list_id)
    version = item_list.version

    started = engine.start_tournament(item_list, version)
    current, tournament = started.item_list, started.tournament
    assert tournament is not None
    points = []

    while tournament.state != TournamentState.COMPLETE:
        for match in pending_matches(tournament):
            assert match.item_b is not None
            item_a = current.get_item(match.item_a)
            item_b = current.get_item(match.item_b)
            winner = item_a.id if item_a.score >= item_b.score else item_b.id
            result = engine.submit_result(current, tournament, match.id, winner, version)
            current = result.item_list
            tournament = result.tournament
            assert tournament is not None
            points.extend(result.history_points)

    new_version = store.save_list(current, version)
    store.persist_history(points)
    logger.info(f"Simulated {len(points) // 2} matches on list {list_id}")

    by_id = {item.id: item for item in current.items}
    table = PrettyTable()
    table.field_names = ["Rank", "Seed", "Id", "Name", "Score", "Out in round"]
    table.align["Rank"] = "r"
    table.align["Score"] = "r"
    for standing in tournament.standings:
        item = by_id[standing.item_id]
        table.add_row([
            standing.rank,
            standing.seed + 1,
            item.id,
            item.name,
            f"{item.score:.1f}",
            standing.eliminated_in if standing.eliminated_in is not None else "-",
        ])
    print(table)
    print(f"Saved list {list_id}, version {new_version}")


def run_history(store: JSONListStore, item_id: str, half_life_days: float) -> None:
    history = HistoryAggregator(store.load_history())
    series = history.series(item_id, half_life_days * DAY_SECONDS)
    if not series:
        print(f"No history for {item_id}")
        return

    raw = history.points(item_id)
    table = PrettyTable()
    table.field_names = ["Time (UTC)", "Score", "Weighted"]
    table.align["Score"] = "r"
    table.align["Weighted"] = "r"
    for point, (timestamp, weighted) in zip(raw, series):
        when = datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        table.add_row([when, f"{point.score:.1f}", f"{weighted:.1f}"])
    print(table)


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = parse_args(argv)
    setup_logging(level=args.log_level, debug=args.debug, log_file=args.log_file)
    logger = get_logger("main")

    try:
        config = EngineConfig(k_factor=args.k_factor, score_floor=args.score_floor)
        store = JSONListStore(Path(args.store_dir))
        engine = ListEngine(config)

        if args.command == "import":
            run_import(store, engine, Path(args.file))
        elif args.command == "query":
            run_query(store, engine, args.list_id, args.query, args.save)
        elif args.command == "simulate":
            run_simulation(store, engine, args.list_id)
        elif args.command == "history":
            run_history(store, args.item_id, args.half_life_days)
    except (ListTournamentError, ValueError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        print("\nInterrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
