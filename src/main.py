from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional

import requests

from .batch_api import DEFAULT_API_URL, ApiError, build_client, fetch_batches
from .batch_index import (
    BatchIndex,
    LineageConsistencyError,
    build_batch_index,
    check_consistency,
    filter_batches,
    founders,
)
from .batch_store import load_batches_json
from .lineage_ascii import render_tree_ascii
from .lineage_layout import DEFAULT_ORIGIN, DEFAULT_SPACING, layout, layout_bounds
from .lineage_summary import appearance_summary, lineage_summary
from .lineage_tree import build_tree_with_report, expand_all
from .lineage_utils import flatten_layout
from .lineage_walk import DEFAULT_MAX_DEPTH, get_ancestors, get_descendants
from .lineage_xlsx import lineage_rows, write_lineage_rows
from .models import Spacing
from .sample_batches import DEFAULT_ROOT_ID, sample_records


# ---------------------------------------------------------------------------

# Tree building, layout and rendering recurse once per generation (twice
# where a list comprehension adds a frame); keep well under the interpreter's
# default recursion limit of 1000.
MAX_DEPTH_LIMIT = 300


def _max_depth(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {raw!r}")
    if value < 0 or value > MAX_DEPTH_LIMIT:
        raise argparse.ArgumentTypeError(f"must be between 0 and {MAX_DEPTH_LIMIT}, got {value}")
    return value


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build, lay out and inspect broodstock batch genealogy trees.",
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument("--batches", metavar="PATH", help="JSON file with batch records.")
    source.add_argument(
        "--api-url",
        metavar="URL",
        nargs="?",
        const=DEFAULT_API_URL,
        help=f"Fetch batches from the dashboard API (default: {DEFAULT_API_URL}).",
    )
    source.add_argument("--sample", action="store_true", help="Use the built-in demo genealogy.")
    parser.add_argument("--token", default=None, help="Bearer token for --api-url.")

    parser.add_argument(
        "--root",
        default=None,
        help="Root batch id for the tree (default: first founder).",
    )

    # expand / collapse state
    parser.add_argument(
        "--expand",
        type=str,
        default=None,
        help="Comma-separated batch ids to expand; every other node is collapsed. "
             "Omit (and omit --expand-all) to lay out the whole tree.",
    )
    parser.add_argument("--expand-all", action="store_true")

    # layout controls
    parser.add_argument("--spacing-x", type=float, default=DEFAULT_SPACING.x)
    parser.add_argument("--spacing-y", type=float, default=DEFAULT_SPACING.y)
    parser.add_argument("--origin-x", type=float, default=DEFAULT_ORIGIN[0])
    parser.add_argument("--origin-y", type=float, default=DEFAULT_ORIGIN[1])
    parser.add_argument(
        "--max-depth",
        type=_max_depth,
        default=DEFAULT_MAX_DEPTH,
        help=f"Generations to descend below the root, 0-{MAX_DEPTH_LIMIT} (default: {DEFAULT_MAX_DEPTH}).",
    )

    # outputs
    parser.add_argument("--ascii", action="store_true", help="Print the tree as indented text.")
    parser.add_argument("--json", action="store_true", help="Print the positioned tree as JSON.")
    parser.add_argument("--ancestors", action="store_true", help="List ancestors of --root.")
    parser.add_argument("--descendants", action="store_true", help="List descendants of --root.")
    parser.add_argument(
        "--dedupe",
        action="store_true",
        help="List each ancestor/descendant once (default preserves repeats).",
    )
    parser.add_argument("--summary", action="store_true", help="Generation summary for --root.")
    parser.add_argument(
        "--check",
        action="store_true",
        help="Report parent/child link inconsistencies (exit 1 if any).",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Refuse to load inconsistent batch data.",
    )

    # batch listing
    parser.add_argument("--search", type=str, default=None)
    parser.add_argument("--generation", type=int, default=None)

    # XLSX export
    parser.add_argument(
        "--export-xlsx",
        type=str,
        default=None,
        metavar="PATH",
        help="Upsert one lineage row per batch into an Excel file.",
    )
    parser.add_argument("--export-sheet", type=str, default="Lineage")

    return parser.parse_args(argv)


def _parse_id_list(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [t.strip() for t in raw.split(",") if t.strip()]


def _load_index(args: argparse.Namespace) -> BatchIndex:
    if args.batches:
        records = load_batches_json(Path(args.batches))
    elif args.api_url:
        session = build_client(args.token)
        records = fetch_batches(session, args.api_url)
    else:
        print("[main] Using built-in sample genealogy")
        records = sample_records()

    return build_batch_index(records, strict=args.strict)


def _pick_root(index: BatchIndex, requested: str | None) -> str | None:
    if requested:
        return requested
    roots = founders(index)
    if roots:
        return roots[0].id
    if DEFAULT_ROOT_ID in index:
        return DEFAULT_ROOT_ID
    return next(iter(index), None)


# ---------------------------------------------------------------------------

def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    # Keep stdout JSON-clean for --json pipelines
    real_stdout = sys.stdout
    if args.json:
        sys.stdout = sys.stderr

    try:
        try:
            index = _load_index(args)
        except LineageConsistencyError as e:
            print("[main] ERROR: inconsistent batch data:", e)
            return 1
        except (FileNotFoundError, ValueError, ApiError, requests.RequestException) as e:
            print("[main] ERROR loading batches:", e)
            return 1

        print(f"[main] Batches loaded: {len(index)}")
        exit_code = 0

        # ---- Consistency report ----
        if args.check:
            issues = check_consistency(index)
            print(f"\n[main] Consistency check: {len(issues)} issue(s)")
            print("-" * 60)
            for issue in issues:
                print(f"  {issue.kind}: {issue.message}")
            if issues:
                exit_code = 1

        # ---- Batch listing ----
        if args.search is not None or args.generation is not None:
            matches = filter_batches(index, search=args.search, generation=args.generation)
            print(f"\n[main] Matching batches: {len(matches)}")
            print("-" * 60)
            for node in matches:
                print(f"  {node.label()}  {node.species or ''}")

        root_id = _pick_root(index, args.root)
        if root_id is None:
            print("[main] No batches to build a tree from")
            return exit_code

        if root_id not in index:
            # Unknown root is an empty result, not an error
            print(f"[main] Root batch not found: {root_id!r}")

        # ---- Tree + layout ----
        if args.expand_all:
            expanded: set[str] | None = expand_all(index)
        elif args.expand is not None:
            expanded = set(_parse_id_list(args.expand))
        else:
            expanded = None

        tree, report = build_tree_with_report(
            root_id,
            index,
            expanded=expanded,
            max_depth=args.max_depth,
        )

        if tree is not None:
            print(f"[main] Tree built from {root_id}")
            if report.dangling:
                print(f"[main] Skipped unknown child ids: {', '.join(report.dangling)}")
            if report.repeated:
                print(f"[main] Skipped repeated ids (second path or cycle): {', '.join(report.repeated)}")
            if report.truncated:
                print(f"[main] Depth limit cut {len(report.truncated)} child link(s)")

            spacing = Spacing(x=args.spacing_x, y=args.spacing_y)
            tree = layout(tree, args.origin_x, args.origin_y, spacing)
            bounds = layout_bounds(tree)
            if bounds is not None:
                print(
                    f"[main] Layout bounds: x={bounds[0]:g}..{bounds[2]:g} "
                    f"y={bounds[1]:g}..{bounds[3]:g}"
                )

        if args.ascii and tree is not None:
            print("\n[main] Genealogy tree\n")
            print(render_tree_ascii(tree))

        # ---- Walkers ----
        walks: dict[str, list[str]] = {}
        if args.ancestors:
            walks["ancestors"] = [n.id for n in get_ancestors(root_id, index, dedupe=args.dedupe)]
        if args.descendants:
            walks["descendants"] = [n.id for n in get_descendants(root_id, index, dedupe=args.dedupe)]

        for name, ids in walks.items():
            print(f"\n[main] {name.capitalize()} of {root_id} ({len(ids)})")
            print("-" * 60)
            for bid in ids:
                print(f"  {index[bid].label()}")

        # ---- Generation summary ----
        summaries: dict[str, Any] = {}
        if args.summary and root_id in index:
            for direction in ("ancestors", "descendants"):
                summary, dist_counts = lineage_summary(index, root_id=root_id, direction=direction)
                appearances, unique = appearance_summary(index, root_id=root_id, direction=direction)
                summaries[direction] = {
                    **summary,
                    "per_distance": dist_counts,
                    "appearances": appearances,
                    "unique": unique,
                }

                print(f"\n[main] {direction.capitalize()} summary for {root_id}")
                print("-" * 60)
                print(f"Total unique nodes (incl. root): {summary['total_nodes']}")
                print(f"Max distance: {summary['max_distance']}")
                print(f"Terminal nodes: {summary['terminal_nodes']}")
                print(f"Open nodes: {summary['open_nodes']}")
                for d in sorted(appearances):
                    a = appearances[d]
                    u = unique.get(d, 0)
                    ratio = (u / a) if a else 0.0
                    print(f"  Distance {d}: appearances={a} unique={u} compression={ratio:.2f}")

        # ---- XLSX export ----
        if args.export_xlsx:
            write_lineage_rows(
                xlsx_path=Path(args.export_xlsx),
                sheet_name=args.export_sheet,
                rows=lineage_rows(index),
            )

        # ---- JSON output ----
        if args.json:
            result: dict[str, Any] = {
                "root_id": root_id,
                "tree": tree.to_dict() if tree is not None else None,
                "nodes": flatten_layout(tree),
                "report": {
                    "dangling": report.dangling,
                    "repeated": report.repeated,
                    "truncated": report.truncated,
                },
            }
            result.update(walks)
            if summaries:
                result["summary"] = summaries

            # Restore real stdout JUST for JSON output
            sys.stdout = real_stdout
            print(json.dumps(result, ensure_ascii=False, indent=2))
            sys.stdout = sys.stderr

        print("\n[main] Done.")
        return exit_code

    finally:
        sys.stdout = real_stdout


if __name__ == "__main__":
    sys.exit(main())
