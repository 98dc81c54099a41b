"""Output Validation Script

Validates that a resolved query result (as written by ``src.run_engine``)
has the expected GraphQL shape:
  - Every typed object has a known ``__typename`` and a ``uid``
  - Every connection is ``{objects, count == len(objects), next_token: null}``
  - List envelopes report ``count`` matching their objects
  - No person appears twice across one object's credit list

Usage:
    python -m src.content_graph.scripts.validate_output \\
        --path output/result.json

Exits with code 0 on success, 1 on validation failure, 2 on argument error.
"""

import argparse
import json
from pathlib import Path
from typing import Any, Dict, List, Tuple

KNOWN_TYPENAMES = {
    "Movie",
    "Episode",
    "Season",
    "Brand",
    "LiveStream",
    "Article",
    "Person",
    "Credit",
    "Genre",
    "Theme",
    "SkylarkTag",
    "Rating",
    "Role",
    "SkylarkImage",
    "CallToAction",
    "Availability",
    "SkylarkSet",
    "SetContent",
}

# Objects that wrap another object and carry no identity of their own.
ENVELOPE_TYPENAMES = {"SetContent"}


def load_result(path: Path) -> Any:
    """Load a resolved result from a JSON file."""
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _validate_connection(node: Dict[str, Any], path: str, errors: List[str]) -> None:
    objects = node.get("objects")
    if not isinstance(objects, list):
        errors.append(f"[{path}] 'objects' should be a list, got {type(objects).__name__}")
        return
    if "count" in node and node["count"] != len(objects):
        errors.append(f"[{path}] count {node['count']} != len(objects) {len(objects)}")
    if "next_token" in node and node["next_token"] is not None:
        errors.append(f"[{path}] next_token should be null, got {node['next_token']!r}")
    if "total_count" in node and node["total_count"] < len(objects):
        errors.append(
            f"[{path}] total_count {node['total_count']} < len(objects) {len(objects)}"
        )


def _validate_credits(node: Dict[str, Any], path: str, errors: List[str]) -> None:
    credits = node.get("credits")
    if not isinstance(credits, dict) or not isinstance(credits.get("objects"), list):
        return

    seen = set()
    for i, credit in enumerate(credits["objects"]):
        people = credit.get("people") if isinstance(credit, dict) else None
        if not isinstance(people, dict):
            continue
        for person in people.get("objects") or []:
            uid = person.get("uid") if isinstance(person, dict) else None
            if uid in seen:
                errors.append(f"[{path}.credits.objects[{i}]] person {uid!r} credited twice")
            seen.add(uid)


def validate_node(node: Any, path: str = "$") -> Tuple[List[str], List[str]]:
    """Validate a result subtree.

    Returns:
        (errors, warnings)
    """
    errors: List[str] = []
    warnings: List[str] = []

    if isinstance(node, list):
        for i, item in enumerate(node):
            e, w = validate_node(item, f"{path}[{i}]")
            errors.extend(e)
            warnings.extend(w)
        return errors, warnings

    if not isinstance(node, dict):
        return errors, warnings

    # --- typed object ---
    typename = node.get("__typename")
    if typename is not None:
        if typename not in KNOWN_TYPENAMES:
            errors.append(f"[{path}] unknown __typename {typename!r}")
        elif typename not in ENVELOPE_TYPENAMES and not node.get("uid"):
            errors.append(f"[{path}] {typename} missing 'uid'")
        if typename in KNOWN_TYPENAMES - ENVELOPE_TYPENAMES and "external_id" not in node:
            warnings.append(f"[{path}] {typename} missing 'external_id'")
        _validate_credits(node, path, errors)

    # --- connection / list envelope ---
    if "objects" in node:
        _validate_connection(node, path, errors)

    for key, value in node.items():
        if isinstance(value, (dict, list)):
            e, w = validate_node(value, f"{path}.{key}")
            errors.extend(e)
            warnings.extend(w)

    return errors, warnings


def main(argv: List[str] | None = None) -> None:
    """Validate a resolved result file.

    Args:
        argv: Command-line arguments. If None, uses sys.argv[1:]

    Raises:
        SystemExit: With code 0 on success, 1 on validation failure
    """
    parser = argparse.ArgumentParser(
        description="Validate a resolved content graph result."
    )
    parser.add_argument(
        "--path",
        type=str,
        required=True,
        help="Path to the JSON result written by run_engine",
    )
    args = parser.parse_args(argv)

    try:
        result = load_result(Path(args.path))
    except Exception as e:
        print(f"FAILED TO LOAD FILE: {e}")
        raise SystemExit(1)

    if result is None:
        print("VALIDATION PASSED")
        print("Result is null (not found or filtered out)")
        raise SystemExit(0)

    errors, warnings = validate_node(result)

    if errors:
        print("VALIDATION FAILED:\n")
        for err in errors:
            print(err)
        print(f"\nTotal errors: {len(errors)}")
        if warnings:
            print(f"Total warnings: {len(warnings)}")
        raise SystemExit(1)

    print("VALIDATION PASSED")
    if warnings:
        print("\nWarnings (non-fatal):")
        for w in warnings:
            print(w)
        print(f"\nTotal warnings: {len(warnings)}")

    raise SystemExit(0)


if __name__ == "__main__":
    main()
