#!/usr/bin/env python3
"""
Loot Report
-----------
Replays a loot log into chat-sized summary lines.

- Reads a loot log (CSV, JSON, JSON lines or XLSX) with columns:
    kind      item | currency | counter
    item_id   numeric item id           (items, unless `link` is given)
    link      full item link            (items, optional)
    currency  currency type id          (currencies)
    quantity  amount added              (counter rows may leave it empty)
  plus any column named with --group-by (e.g. session, zone, container).
- Item / currency names, icons and qualities come from a catalog file (JSON/YAML)
  or a catalog URL (cached under cache/catalogs/).
- Options come from a YAML file (`loot_summary:` section); see loot_options.py.
- Defaults can be set in .env:
    LOOT_SUMMARY_CATALOG, LOOT_SUMMARY_CATALOG_URL, LOOT_SUMMARY_OPTIONS
- Prints one summary per group and can write a Markdown report (--out-md).

Progress Reporting (script-level)
---------------------------------
- Flags: `--quiet`, `--verbose`, `--progress-json <path>`.
- Phases: load catalog → read log → summarize → export; emits final summary.
"""

import argparse
import json
import os
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
from dotenv import load_dotenv

from loot_catalog import ItemCatalog, ItemLookup, render_plain
from loot_errors import EmptySummary, InconsistentState, InvalidArgument
from loot_options import load_options_file
from loot_summary import FALLBACK_MAX_CHARS_PER_LINE, LootSummary


# ---------------- Progress utils (lightweight) ----------------
@dataclass
class Step:
    name: str
    status: str = "pending"  # pending | in_progress | completed | failed
    started_at: Optional[float] = None
    ended_at: Optional[float] = None
    items_done: int = 0


class ProgressReporter:
    def __init__(
        self,
        script: str,
        quiet: bool = False,
        verbose: bool = False,
        json_path: Optional[str] = None,
    ) -> None:
        self.script = script
        self.quiet = quiet
        self.verbose = verbose
        self.json_path = json_path
        self.t0 = time.time()
        self.steps: List[Step] = []

    def start(self, name: str) -> Step:
        st = Step(name=name, status="in_progress", started_at=time.time())
        self.steps.append(st)
        if self.verbose and not self.quiet:
            print(f"→ {name}…")
        return st

    def update(self, st: Step, done: int) -> None:
        st.items_done = done
        if self.verbose and not self.quiet:
            print(f"{st.name}: {done} done, elapsed {int(time.time() - st.started_at)}s")

    def end(self, st: Step, status: str = "completed") -> None:
        st.status = status
        st.ended_at = time.time()
        if self.verbose and not self.quiet:
            elapsed = int((st.ended_at - (st.started_at or st.ended_at)))
            print(f"✓ {st.name} in {elapsed}s")

    def finalize(self, totals: Dict[str, Any], errors: List[str]) -> None:
        elapsed = int(time.time() - self.t0)
        if not self.quiet:
            print(
                f"[report] Summary: events={totals.get('events', 0)}, groups={totals.get('groups', 0)}, "
                f"lines={totals.get('lines', 0)}, empty_groups={totals.get('empty_groups', 0)} | elapsed={elapsed}s"
            )
            if errors:
                print(f"Warnings: {len(errors)}")
        if self.json_path:
            payload = {
                "script": self.script,
                "started_at": self.t0,
                "ended_at": time.time(),
                "elapsed_s": elapsed,
                "steps": [
                    {
                        "name": s.name,
                        "status": s.status,
                        "started_at": s.started_at,
                        "ended_at": s.ended_at,
                        "items_done": s.items_done,
                    }
                    for s in self.steps
                ],
                "totals": totals,
                "errors": errors,
            }
            Path(self.json_path).write_text(json.dumps(payload, indent=2), encoding="utf-8")


# ---------------- Console chat ----------------
class ConsoleChat:
    """Chat sink for terminals: renders link/icon markup as text and keeps what it printed."""

    supports_icon_compression = True

    def __init__(self, max_chars_per_line: int = FALLBACK_MAX_CHARS_PER_LINE, lookup: Optional[ItemLookup] = None, echo: bool = True) -> None:
        self.max_chars_per_line = int(max_chars_per_line)
        self.lookup = lookup
        self.echo = echo
        self.lines: List[str] = []

    def print(self, message: str) -> None:
        text = render_plain(message, self.lookup)
        self.lines.append(text)
        if self.echo:
            print(text)


# ---------------- Log IO ----------------
# Label for rows whose group cell is empty
NO_GROUP_LABEL = "(none)"


def read_loot_log(path: str) -> pd.DataFrame:
    p = Path(path)
    suffix = p.suffix.lower()
    if suffix in (".xlsx", ".xls"):
        df = pd.read_excel(p)
    elif suffix == ".jsonl":
        df = pd.read_json(p, lines=True)
    elif suffix == ".json":
        df = pd.read_json(p)
    else:
        df = pd.read_csv(p)
    df.columns = [str(c).strip().lower() for c in df.columns]
    if "kind" not in df.columns:
        raise ValueError(f"{path}: loot log needs a 'kind' column")
    df["kind"] = df["kind"].astype(str).str.strip().str.lower()
    return df


def _cell(row: pd.Series, column: str) -> Any:
    if column not in row.index:
        return None
    value = row[column]
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    # numpy scalars → plain Python values
    if hasattr(value, "item") and not isinstance(value, str):
        value = value.item()
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def replay_events(summary: LootSummary, df: pd.DataFrame) -> Tuple[int, List[str]]:
    """Feed log rows into the summary; returns (events applied, warnings)."""
    applied = 0
    errors: List[str] = []
    for idx, row in df.iterrows():
        kind = row["kind"]
        qty = _cell(row, "quantity")
        try:
            if kind == "item":
                link = _cell(row, "link")
                if link:
                    summary.add_item_link(str(link), qty)
                else:
                    summary.add_item_id(_cell(row, "item_id"), qty)
            elif kind == "currency":
                ctype = _cell(row, "currency")
                summary.add_currency(ctype, qty if qty is not None else 0)
            elif kind == "counter":
                summary.increment_counter()
            else:
                errors.append(f"unknown_kind:{idx}:{kind}")
                print(f"⚠️ Row {idx}: unknown kind {kind!r}")
                continue
        except InvalidArgument as exc:
            errors.append(f"invalid_row:{idx}")
            print(f"⚠️ Row {idx}: {exc}")
            continue
        applied += 1
    return applied, errors


def summarize_log(
    summary: LootSummary,
    df: pd.DataFrame,
    group_by: Optional[str] = None,
) -> Tuple[Dict[str, List[str]], List[str], int]:
    """Print one summary per group; returns ({group: lines}, warnings, events applied)."""
    results: Dict[str, List[str]] = {}
    errors: List[str] = []
    events = 0
    if group_by:
        if group_by not in df.columns:
            raise ValueError(f"group column {group_by!r} not in loot log")
        # Rows with an empty group cell form their own group
        groups = [
            (NO_GROUP_LABEL if pd.isna(k) else str(k), g)
            for k, g in df.groupby(group_by, sort=False, dropna=False)
        ]
    else:
        groups = [("all", df)]

    chat = summary.chat
    for label, frame in groups:
        applied, errs = replay_events(summary, frame)
        events += applied
        errors.extend(errs)
        before = len(getattr(chat, "lines", []))
        try:
            summary.print()
        except InconsistentState:
            raise
        except EmptySummary:
            errors.append(f"empty_group:{label}")
            print(f"⚠️ Nothing to summarize for {label}")
            summary.reset()
            results[label] = []
            continue
        results[label] = list(getattr(chat, "lines", [])[before:])
    return results, errors, events


def export_md(results: Dict[str, List[str]], path: str, *, meta: Optional[Dict[str, Any]] = None) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write("# Loot Summary\n\n")
        if meta:
            f.write("## Run Settings\n")
            for k, v in meta.items():
                f.write(f"- {k}: {v!r}\n" if isinstance(v, str) else f"- {k}: {v}\n")
            f.write("\n")
        for label, lines in results.items():
            f.write(f"## {label}\n\n")
            if not lines:
                f.write("_(nothing to summarize)_\n\n")
                continue
            for line in lines:
                for part in line.split("\n"):
                    if part.strip():
                        f.write(f"- {part.strip()}\n")
            f.write("\n")


def load_catalog(path: Optional[str], url: Optional[str], refresh_cache: bool = False) -> ItemCatalog:
    if path:
        return ItemCatalog.from_file(path)
    if url:
        return ItemCatalog.from_url(url, refresh_cache=refresh_cache)
    return ItemCatalog()


# ---------------- Main ----------------
def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    ap = argparse.ArgumentParser(description="Replay a loot log into chat-sized summary lines")
    ap.add_argument("log", help="Loot log (CSV, JSON, JSONL or XLSX)")
    ap.add_argument("--catalog", default=os.getenv("LOOT_SUMMARY_CATALOG"), help="Catalog file (JSON/YAML) with item and currency metadata")
    ap.add_argument("--catalog-url", default=os.getenv("LOOT_SUMMARY_CATALOG_URL"), help="Catalog URL (used when --catalog is not given)")
    ap.add_argument("--refresh-cache", action="store_true", help="Re-download the catalog instead of using the cache")
    ap.add_argument("--options", default=os.getenv("LOOT_SUMMARY_OPTIONS", "loot_summary.yaml"), help="YAML options file")
    ap.add_argument("--group-by", default=None, help="Print one summary per value of this column")
    ap.add_argument("--max-chars", type=int, default=FALLBACK_MAX_CHARS_PER_LINE, help=f"Characters per chat line (default: {FALLBACK_MAX_CHARS_PER_LINE})")
    ap.add_argument("--prefix", default="", help="Text placed before every line")
    ap.add_argument("--suffix", default="", help="Text placed after every line")
    ap.add_argument("--counter-text", default=None, help="Noun for counter rows, e.g. 'container'")
    ap.add_argument("--out-md", default=None, help="Write a Markdown report to this path")
    ap.add_argument("--progress-json", default=None, help="Write progress JSON to this path")
    ap.add_argument("--quiet", action="store_true", help="Only print summary lines")
    ap.add_argument("--verbose", action="store_true", help="Print step-by-step logs")
    args = ap.parse_args(argv)

    prog = ProgressReporter(script="report", quiet=args.quiet, verbose=args.verbose, json_path=args.progress_json)
    errors: List[str] = []

    st_catalog = prog.start("Load catalog")
    try:
        catalog = load_catalog(args.catalog, args.catalog_url, refresh_cache=args.refresh_cache)
    except (OSError, ValueError) as exc:
        print(f"⚠️ Could not load catalog: {exc}")
        prog.end(st_catalog, status="failed")
        return 1
    prog.end(st_catalog)

    options = load_options_file(args.options) if args.options else {}
    chat = ConsoleChat(max_chars_per_line=args.max_chars, lookup=catalog)
    summary = LootSummary(
        options,
        chat=chat,
        prefix=args.prefix,
        suffix=args.suffix,
        counter_text=args.counter_text,
        lookup=catalog,
    )
    if args.counter_text and "showCounter" not in options:
        summary.set_show_counter(True)

    st_read = prog.start("Read loot log")
    try:
        df = read_loot_log(args.log)
    except (OSError, ValueError) as exc:
        print(f"⚠️ Could not read {args.log}: {exc}")
        prog.end(st_read, status="failed")
        return 1
    st_read.items_total = st_read.items_done = int(df.shape[0])
    prog.end(st_read)

    st_sum = prog.start("Summarize")
    try:
        results, errs, events = summarize_log(summary, df, group_by=args.group_by)
    except ValueError as exc:
        print(f"⚠️ {exc}")
        prog.end(st_sum, status="failed")
        return 1
    errors.extend(errs)
    prog.update(st_sum, done=len(results))
    prog.end(st_sum)

    if args.out_md:
        st_export = prog.start("Export files")
        meta = {"log": args.log, "group_by": args.group_by or "", "max_chars": args.max_chars}
        meta.update(summary.registry.snapshot())
        export_md(results, args.out_md, meta=meta)
        prog.end(st_export)
        if not args.quiet:
            print(f"✅ Saved: {args.out_md}")

    totals = {
        "events": events,
        "groups": len(results),
        "lines": sum(len(v) for v in results.values()),
        "empty_groups": sum(1 for v in results.values() if not v),
    }
    prog.finalize(totals=totals, errors=errors)
    return 0


if __name__ == "__main__":
    sys.exit(main())
