"""Presentation-layer enrichment of loaded applications (aliases and icon paths)."""

import os
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from .identity import icon_path_for
from .models import ApplicationNameAlias, ApplicationRecord, WorkingApplication


def _alias_key(path: str) -> str:
    return os.path.normcase(os.path.normpath(path)) if path else path


def apply_aliases(
    applications: Iterable[WorkingApplication],
    aliases: Iterable[ApplicationNameAlias],
) -> List[WorkingApplication]:
    """
    Attach configured display aliases by launch path.

    Paths are compared after normalization (and case folding where the
    platform is case-insensitive). The input is not modified.

    Args:
        applications: Loaded applications
        aliases: Configured alias entries; the last entry for a path wins

    Returns:
        New list of applications with ``alias`` set where configured
    """
    by_path: Dict[str, str] = {_alias_key(entry.path): entry.alias for entry in aliases if entry.alias}
    return [
        replace(app, alias=by_path.get(_alias_key(app.path), app.alias))
        for app in applications
    ]


def resolve_icon_paths(applications: Iterable[WorkingApplication], icon_dir: Optional[str]) -> List[WorkingApplication]:
    """
    Fill in the cached icon path of every application.

    The path is set only when the icon file exists in ``icon_dir``.
    """
    if not icon_dir:
        return list(applications)
    resolved = []
    for app in applications:
        icon_path = icon_path_for(app.app_id, icon_dir)
        resolved.append(replace(app, icon_path=icon_path if os.path.isfile(icon_path) else None))
    return resolved


def build_working_set(
    records: Iterable[ApplicationRecord],
    aliases: Iterable[ApplicationNameAlias] = (),
    icon_dir: Optional[str] = None,
    now: Optional[float] = None,
) -> List[WorkingApplication]:
    """
    Turn stored records into the UI-facing working set.

    Computes the usage recency score, joins aliases and resolves icon paths.
    Nothing computed here is written back to the store.
    """
    applications = [WorkingApplication.from_record(record, now) for record in records]
    applications = apply_aliases(applications, aliases)
    return resolve_icon_paths(applications, icon_dir)
