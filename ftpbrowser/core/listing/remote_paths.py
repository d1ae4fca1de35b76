from __future__ import annotations


def normalize(path: str, directory: bool = False) -> str:
    cleaned = path.replace("\r", "").replace("\n", "")
    keep_trailing = directory or cleaned.endswith("/")

    normalized = "/" + "/".join(part for part in cleaned.split("/") if part)
    if keep_trailing and not normalized.endswith("/"):
        normalized += "/"
    return normalized


def parent_of(path: str) -> str:
    if path == "/" or path == "":
        return "/"

    work_path = path[:-1] if path.endswith("/") else path
    last_slash = work_path.rfind("/")
    if last_slash <= 0:
        return "/"
    return work_path[: last_slash + 1]


def join(base: str, name: str, directory: bool = False) -> str:
    if base.endswith("/"):
        joined = base + name
    else:
        joined = base + "/" + name
    return normalize(joined, directory=directory)


def last_component(path: str) -> str:
    parts = [part for part in path.replace("\r", "").split("/") if part]
    return parts[-1] if parts else "/"
