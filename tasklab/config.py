from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlencode, urlsplit

DEFAULT_SERVER = "https://firefox-ci-tc.services.mozilla.com"
DEFAULT_PROFILER_TOOL_URL = (
    "https://gregtatum.github.io/taskcluster-tools/src/taskprofiler/"
)

# "first": first timestamped row in sequence order.
# "earliest": smallest timestamp over all rows.
ANCHOR_POLICIES = ("first", "earliest")


def normalize_server(text: str | None) -> str:
    """Return a usable server root, falling back to the default one.

    The trailing slash is removed so joined paths never double it.
    """

    if not text or not text.strip():
        return DEFAULT_SERVER
    candidate = text.strip()
    try:
        parts = urlsplit(candidate)
    except ValueError:
        return DEFAULT_SERVER
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return DEFAULT_SERVER
    return candidate.rstrip("/")


@dataclass(frozen=True)
class TraceSettings:
    server: str = DEFAULT_SERVER
    profiler_tool_url: str = DEFAULT_PROFILER_TOOL_URL
    anchor: str = "first"

    def __post_init__(self) -> None:
        if self.anchor not in ANCHOR_POLICIES:
            raise ValueError(
                f"anchor policy must be one of {ANCHOR_POLICIES} (got {self.anchor!r})"
            )

    @staticmethod
    def from_values(
        *,
        server: str | None = None,
        profiler_tool_url: str | None = None,
        anchor: str | None = None,
    ) -> "TraceSettings":
        return TraceSettings(
            server=normalize_server(server),
            profiler_tool_url=profiler_tool_url or DEFAULT_PROFILER_TOOL_URL,
            anchor=anchor or "first",
        )

    def task_group_url(self, task_group_id: str) -> str:
        return f"{self.server}/tasks/groups/{task_group_id}"

    def task_group_profile_url(self, task_group_id: str) -> str:
        return f"{self.profiler_tool_url}?{urlencode({'taskGroupId': task_group_id})}"
