"""
Extension and package registries for a Python host.

Extensions are distributions that register an entry point in the configured
group. An entry point named ``forms.rest`` is the ``rest`` plugin of the
``forms`` extension. Updates are looked up on a PyPI-compatible JSON index.
"""
from __future__ import annotations

from importlib.metadata import EntryPoint, entry_points
from typing import Callable, Dict, Iterable, List, Optional

import httpx
from loguru import logger
from packaging.version import InvalidVersion, Version

from services.contracts import Extension, PackageDescriptor, PackageFile


def _dist_info(ep: EntryPoint) -> tuple[str, str]:
    dist = getattr(ep, "dist", None)
    if dist is None:
        return ep.name, ""
    return dist.metadata["Name"], dist.version


class EntryPointExtensionRegistry:
    def __init__(
        self,
        group: str,
        disabled: Iterable[str] = (),
        loader: Callable[[str], Iterable[EntryPoint]] | None = None,
    ) -> None:
        self.group = group
        self.disabled = {d.strip() for d in disabled if d.strip()}
        self._loader = loader or (lambda g: entry_points(group=g))
        self._cache: Optional[Dict[str, Extension]] = None
        self._dists: Dict[str, str] = {}

    def _load(self) -> Dict[str, Extension]:
        if self._cache is not None:
            return self._cache
        tops: Dict[str, tuple[str, str]] = {}
        plugins: Dict[str, List[Extension]] = {}
        for ep in self._loader(self.group):
            dist_name, version = _dist_info(ep)
            if "." in ep.name:
                parent, _, child = ep.name.partition(".")
                plugins.setdefault(parent, []).append(
                    Extension(name=child, version=version, active=ep.name not in self.disabled)
                )
            else:
                tops[ep.name] = (dist_name, version)
        result: Dict[str, Extension] = {}
        for name, (dist_name, version) in sorted(tops.items()):
            self._dists[name] = dist_name
            result[name] = Extension(
                name=name,
                version=version,
                active=name not in self.disabled,
                plugins=tuple(plugins.get(name, ())),
            )
        self._cache = result
        return result

    def registered(self) -> List[Extension]:
        return list(self._load().values())

    def get(self, name: str) -> Optional[Extension]:
        return self._load().get(name)

    def distribution(self, name: str) -> Optional[str]:
        self._load()
        return self._dists.get(name)


class PyPIPackageRegistry:
    """Finds newer releases of the registered extensions on a JSON index."""

    def __init__(
        self,
        extensions: EntryPointExtensionRegistry,
        index_url: str = "https://pypi.org/pypi",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.extensions = extensions
        self.index_url = index_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def update_packages(self) -> List[PackageDescriptor]:
        out: List[PackageDescriptor] = []
        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            for ext in self.extensions.registered():
                dist = self.extensions.distribution(ext.name) or ext.name
                try:
                    newer = self._newer_releases(client, dist, ext.version)
                except (httpx.HTTPError, ValueError) as e:
                    logger.warning(f"Package index lookup failed for {dist}: {e}")
                    continue
                if newer:
                    out.append(PackageDescriptor(key=ext.name, files=tuple(PackageFile(v) for v in newer)))
        return out

    def _newer_releases(self, client: httpx.Client, dist: str, installed: str) -> List[str]:
        r = client.get(f"{self.index_url}/{dist}/json")
        r.raise_for_status()
        payload = r.json()
        releases = payload.get("releases") if isinstance(payload, dict) else None
        if not isinstance(releases, dict):
            raise ValueError("index response has no releases mapping")
        try:
            current = Version(installed)
        except InvalidVersion:
            logger.warning(f"Installed version of {dist} is not comparable: {installed!r}")
            return []
        newer: List[Version] = []
        for raw, files in releases.items():
            try:
                v = Version(raw)
            except InvalidVersion:
                continue
            if v.is_prerelease or v <= current:
                continue
            # releases without files or fully yanked ones are not installable
            if not files or all(f.get("yanked") for f in files):
                continue
            newer.append(v)
        return [str(v) for v in sorted(newer)]
