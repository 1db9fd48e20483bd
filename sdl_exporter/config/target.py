"""Resolved export target."""

import shlex
from dataclasses import dataclass, field
from typing import Optional, Tuple
from urllib.parse import urljoin

from .settings import ExportOptions


@dataclass(frozen=True)
class Target:
    """Where the schema is read from.

    Either an HTTP endpoint that is already reachable, or an executable that
    has to be launched at ``launch_url`` before its endpoint can be polled.
    """

    source: str
    from_url: bool
    endpoint: str
    launch_url: Optional[str] = None
    extra_args: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def executable(self) -> Optional[str]:
        return None if self.from_url else self.source

    @classmethod
    def from_options(cls, options: ExportOptions) -> "Target":
        """Resolve the target described by validated export options."""
        if options.from_url:
            return cls(source=options.source, from_url=True, endpoint=options.source)

        service_url = (options.service_url or "").rstrip("/")
        endpoint = urljoin(f"{service_url}/", options.api_path.lstrip("/"))

        return cls(
            source=options.source,
            from_url=False,
            endpoint=endpoint,
            launch_url=options.service_url,
            extra_args=tuple(shlex.split(options.additional_args or "")),
        )

    @property
    def default_output_file(self) -> str:
        """Output file used when none is configured."""
        return "service.graphql" if self.from_url else f"{self.source}.graphql"
