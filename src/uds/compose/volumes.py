"""Named volume inference from mount specs."""

from typing import Iterable, List, Optional


def named_volume_source(mount: str) -> Optional[str]:
    """Return the named volume a mount refers to, if any.

    The source is the text before the first ``:``. Relative paths, absolute
    paths and home-relative paths are bind mounts, not named volumes.
    """
    if ":" not in mount:
        return None
    source = mount.split(":", 1)[0].strip()
    if not source or source.startswith((".", "/", "~")):
        return None
    return source


def infer_named_volumes(mounts: Iterable[str]) -> List[str]:
    """Distinct named volumes referenced by ``mounts``, in first-seen order."""
    names: List[str] = []
    for mount in mounts:
        name = named_volume_source(mount)
        if name and name not in names:
            names.append(name)
    return names
