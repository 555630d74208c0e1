from dataclasses import dataclass


@dataclass(frozen=True)
class WatchRecord:
    """One registered watch: a profile page and where to report its changes."""
    target: str
    token: str
    callback: str

    @property
    def fingerprint(self) -> str:
        return fingerprint(self.target, self.callback)


@dataclass(frozen=True)
class StatusSnapshot:
    """Result of one probe. label/link/icon are empty unless active."""
    reachable: bool = False
    active: bool = False
    label: str = ""
    link: str = ""
    icon: str = ""


def fingerprint(target: str, callback: str) -> str:
    # Identity excludes the token.
    return target + "|" + callback


def status_digest(snapshot: StatusSnapshot, callback: str) -> str:
    return snapshot.link + "|" + ("true" if snapshot.active else "false") + "|" + callback
