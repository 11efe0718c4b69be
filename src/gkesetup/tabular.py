# tabular.py
# Reading names out of the human-readable tables gcloud prints.
#
# gcloud's `list` commands are the only way to learn some names (the cluster
# picks the instance group name; the address is assigned on reservation).
# The lookups below index the whole table as one flat token sequence, header
# tokens included. Each lookup first checks the header and row shape:
#
#   NAME                           LOCATION       SCOPE  NETWORK  MANAGED  INSTANCES
#   foo-clus-default-pool-bar-grp  us-central1-a  zone   default  Yes      2
#
#   -> token 6 is the instance group name
#
#   NAME                       REGION  ADDRESS         STATUS
#   load-balancer-external-ip          35.201.127.254  IN_USE
#
#   -> blank REGION contributes no token, so token 5 is the address
#
# Any change to the column layout breaks these positions, so each named
# resolver checks the table shape first and refuses to guess.
from __future__ import annotations

from typing import List, Sequence

from .errors import EmptyOutputError, IndexOutOfRangeError, TableShapeError

INSTANCE_GROUP_HEADER = ("NAME", "LOCATION", "SCOPE", "NETWORK", "MANAGED", "INSTANCES")
INSTANCE_GROUP_NAME_INDEX = 6

ADDRESS_HEADER = ("NAME", "REGION", "ADDRESS", "STATUS")
# Global addresses leave REGION blank
GLOBAL_ADDRESS_ROW_WIDTH = 3
EXTERNAL_IP_INDEX = 5


def parse(raw_text: str) -> List[List[str]]:
    """
    Split tabular CLI output into rows of whitespace-separated tokens.

    Blank lines are dropped. Header and data rows are not told apart.

    Raises:
        EmptyOutputError: if raw_text is empty or whitespace only
    """
    if not raw_text or not raw_text.strip():
        raise EmptyOutputError("The command returned no output to parse.")
    return [line.split() for line in raw_text.splitlines() if line.strip()]


def flatten(rows: Sequence[Sequence[str]]) -> List[str]:
    return [token for row in rows for token in row]


def tokenize(raw_text: str) -> List[str]:
    """parse() + flatten(): the whole blob as one token sequence."""
    return flatten(parse(raw_text))


def resolve(tokens: Sequence[str], index: int) -> str:
    """
    Return the token at an absolute position.

    Raises:
        IndexOutOfRangeError: if index is negative or >= len(tokens)
    """
    if index < 0 or index >= len(tokens):
        raise IndexOutOfRangeError(
            f"Token {index} requested but the output only has {len(tokens)} token(s)."
        )
    return tokens[index]


def _check_shape(
    rows: List[List[str]],
    header: Sequence[str],
    row_width: int,
    what: str,
) -> None:
    if tuple(rows[0]) != tuple(header):
        raise TableShapeError(
            f"Unexpected {what} table header: {' '.join(rows[0])}",
            hint=f"Expected: {' '.join(header)}",
        )
    data = rows[1:]
    if len(data) != 1:
        raise TableShapeError(f"Expected exactly one {what} row, found {len(data)}.")
    if len(data[0]) != row_width:
        raise TableShapeError(
            f"Expected {row_width} columns in the {what} row, found {len(data[0])}: {' '.join(data[0])}"
        )


def resolve_instance_group_name(raw_text: str) -> str:
    """Name of the instance group GKE generated, from `gcloud compute instance-groups list`."""
    rows = parse(raw_text)
    _check_shape(rows, INSTANCE_GROUP_HEADER, len(INSTANCE_GROUP_HEADER), "instance group")
    return resolve(flatten(rows), INSTANCE_GROUP_NAME_INDEX)


def resolve_external_ip(raw_text: str) -> str:
    """Reserved global address, from `gcloud compute addresses list`."""
    rows = parse(raw_text)
    _check_shape(rows, ADDRESS_HEADER, GLOBAL_ADDRESS_ROW_WIDTH, "address")
    return resolve(flatten(rows), EXTERNAL_IP_INDEX)
