"""SSH public key listing parsers.

Metadata services list keys in a few different shapes:

- indexed listing, ``"<index>=<name>"`` per line (EC2, OpenStack); the key
  bodies are fetched per index by the provider
- colon listing, ``"<user>:<key>"`` per line (GCE); the key body is inline
- key array, already decoded from a JSON document (DigitalOcean)

Everything here is pure: no I/O, no fetching. An absent or empty listing
yields no keys. A malformed line is a ParseError for the whole listing.
"""

from __future__ import annotations

from collections.abc import Sequence

from bootmeta.errors import ParseError


def parse_indexed_listing(blob: str | None) -> list[tuple[str, str]]:
    """Parse ``index=name`` lines into (index, name) pairs, in order.

    Only the first ``=`` separates index from name, so names may contain it.
    """
    entries: list[tuple[str, str]] = []
    for line in (blob or "").splitlines():
        index, sep, name = line.partition("=")
        if not sep:
            raise ParseError("public key listing entry", line)
        entries.append((index, name))
    return entries


def first_key_index(blob: str | None) -> str | None:
    """Index of the first listed key, or None for an empty listing.

    The first line must hold exactly one ``=``.
    """
    lines = (blob or "").splitlines()
    if not lines:
        return None
    tokens = lines[0].split("=")
    if len(tokens) != 2:
        raise ParseError("public key listing entry", lines[0])
    return tokens[0]


def unique_key_indices(blob: str | None) -> list[str]:
    """Indices to fetch, one per distinct key name.

    When several indices share a name, the last one wins.
    """
    by_name: dict[str, str] = {}
    for index, name in parse_indexed_listing(blob):
        by_name[name] = index
    return list(by_name.values())


def parse_colon_listing(blob: str | None) -> list[str]:
    """Key bodies from ``prefix:key`` lines, in line order.

    Empty lines are skipped; anything after the first colon is the key.
    """
    keys: list[str] = []
    for line in (blob or "").split("\n"):
        if not line:
            continue
        _, sep, key = line.partition(":")
        if not sep:
            raise ParseError("public key listing entry", line)
        keys.append(key)
    return keys


def normalize_key_array(keys: Sequence[object] | None) -> list[str]:
    """Validate an already-decoded key array and return it verbatim."""
    if keys is None:
        return []
    if isinstance(keys, str) or not isinstance(keys, Sequence):
        raise ParseError("public key array", keys)
    for key in keys:
        if not isinstance(key, str):
            raise ParseError("public key", key)
    return list(keys)  # type: ignore[arg-type]
