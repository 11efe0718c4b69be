# templates.py
from __future__ import annotations

import os
import shutil
from collections.abc import Mapping
from pathlib import Path
from typing import Callable, Iterable, List, Tuple, TypeVar, Union

T = TypeVar("T")

Substitutions = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


def backup_path_for(path: Path) -> Path:
    """iam-policy.json -> temp-iam-policy.json, next to the original."""
    return path.with_name(f"temp-{path.name}")


class TemplateMutation:
    """
    Context manager that fills placeholder tokens in a config file for the
    duration of a `with` block and puts the original bytes back afterwards.

    The original is copied to a backup before any substitution and moved back
    over the artifact on every exit path (normal exit, exception, abort).
    Substitutions are literal byte-level replace-all, applied in the order
    given; line endings and everything outside the placeholders are kept.
    """

    def __init__(self, path: Union[str, Path], substitutions: Substitutions):
        self.path = Path(path)
        if isinstance(substitutions, Mapping):
            substitutions = substitutions.items()
        self.substitutions: List[Tuple[str, str]] = [(str(k), str(v)) for k, v in substitutions]
        self.backup = backup_path_for(self.path)

    def __enter__(self) -> Path:
        shutil.copy2(self.path, self.backup)
        try:
            data = self.path.read_bytes()
            for placeholder, value in self.substitutions:
                data = data.replace(placeholder.encode("utf-8"), value.encode("utf-8"))
            self.path.write_bytes(data)
        except BaseException:
            self._restore()
            raise
        return self.path

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._restore()
        return False

    def _restore(self) -> None:
        os.replace(self.backup, self.path)


def with_mutation(
    path: Union[str, Path],
    substitutions: Substitutions,
    action: Callable[[Path], T],
) -> T:
    """Run action(path) while the artifact holds the substituted content."""
    with TemplateMutation(path, substitutions) as mutated:
        return action(mutated)
