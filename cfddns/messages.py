"""Messages sent to monitors and notifiers after detecting and updating addresses."""

from __future__ import annotations

import enum
import itertools
from dataclasses import dataclass, field
from ipaddress import IPv4Address, IPv6Address
from typing import Iterable


class IPNet(enum.Enum):
    """An IP network family."""

    IP4 = 4
    IP6 = 6

    def describe(self) -> str:
        return "IPv4" if self is IPNet.IP4 else "IPv6"

    def record_type(self) -> str:
        return "A" if self is IPNet.IP4 else "AAAA"


class ResponseCode(enum.Enum):
    """The outcome of one update."""

    NOOP = enum.auto()
    UPDATING = enum.auto()
    UPDATED = enum.auto()
    FAILED = enum.auto()


@dataclass
class MonitorMessage:
    """A status and lines of text for monitors."""

    ok: bool = True
    lines: list[str] = field(default_factory=list)


@dataclass
class Message:
    """Messages for both monitors and notifiers."""

    monitor_message: MonitorMessage = field(default_factory=MonitorMessage)
    notifier_message: list[str] = field(default_factory=list)


def join(items: Iterable[str]) -> str:
    """Join items with commas."""
    return ", ".join(items)


def english_join(items: Iterable[str]) -> str:
    """Join items as an English list, with a serial comma."""
    items = list(items)
    if len(items) <= 1:
        return "".join(items)
    if len(items) == 2:
        return f"{items[0]} and {items[1]}"
    return f"{', '.join(items[:-1])}, and {items[-1]}"


def merge_monitor_messages(*args: MonitorMessage) -> MonitorMessage:
    """Combine monitor messages, keeping only the lines that match the overall status."""
    all_ok = all(msg.ok for msg in args)
    lines = [line for msg in args if msg.ok == all_ok for line in msg.lines]
    return MonitorMessage(ok=all_ok, lines=lines)


def merge_notifier_messages(*args: list[str]) -> list[str]:
    """Concatenate notifier messages."""
    return list(itertools.chain.from_iterable(args))


def merge_messages(*args: Message) -> Message:
    """Combine compound messages."""
    return Message(
        monitor_message=merge_monitor_messages(*(m.monitor_message for m in args)),
        notifier_message=merge_notifier_messages(*(m.notifier_message for m in args)),
    )


class SetterResponses:
    """Names grouped by the outcome of their updates, in registration order."""

    def __init__(self) -> None:
        self._names: dict[ResponseCode, list[str]] = {}

    def register(self, name: str, code: ResponseCode) -> None:
        self._names.setdefault(code, []).append(name)

    def __getitem__(self, code: ResponseCode) -> list[str]:
        return list(self._names.get(code, ()))

    def __repr__(self) -> str:
        return f"SetterResponses({self._names!r})"


_ORDER = (ResponseCode.FAILED, ResponseCode.UPDATING, ResponseCode.UPDATED)


def _monitor(responses: SetterResponses, templates: dict[ResponseCode, str], **ctx: str) -> MonitorMessage:
    failed = responses[ResponseCode.FAILED]
    if failed:
        return MonitorMessage(ok=False, lines=[templates[ResponseCode.FAILED].format(names=join(failed), **ctx)])
    lines = [
        templates[code].format(names=join(names), **ctx)
        for code in (ResponseCode.UPDATING, ResponseCode.UPDATED)
        if (names := responses[code])
    ]
    return MonitorMessage(ok=True, lines=lines)


def _notifier(
    responses: SetterResponses, templates: dict[ResponseCode, tuple[str, str]], **ctx: str
) -> list[str]:
    fragments: list[str] = []
    for code in _ORDER:
        names = responses[code]
        if not names:
            continue
        leading, following = templates[code]
        template = following if fragments else leading
        fragments.append(template.format(names=english_join(names), **ctx))
    return ["".join(fragments) + "."] if fragments else []


def generate_detect_message(ip_net: IPNet, ok: bool) -> Message:
    """Build the message reporting the detection of an address."""
    if ok:
        return Message()
    return Message(
        monitor_message=MonitorMessage(ok=False, lines=[f"Failed to detect {ip_net.describe()} address"]),
        notifier_message=[f"Failed to detect the {ip_net.describe()} address."],
    )


_UPDATE_MONITOR = {
    ResponseCode.FAILED: "Failed to set {rt} ({ip}) of {names}",
    ResponseCode.UPDATING: "Setting {rt} ({ip}) of {names}",
    ResponseCode.UPDATED: "Set {rt} ({ip}) of {names}",
}
_UPDATE_NOTIFIER = {
    ResponseCode.FAILED: ("Failed to properly update {rt} records of {names} with {ip}",) * 2,
    ResponseCode.UPDATING: ("Updating {rt} records of {names} with {ip}", "; updating those of {names}"),
    ResponseCode.UPDATED: ("Updated {rt} records of {names} with {ip}", "; updated those of {names}"),
}


def generate_update_message(
    ip_net: IPNet, ip: IPv4Address | IPv6Address | str, responses: SetterResponses
) -> Message:
    """Build the message reporting the updates of DNS records."""
    ctx = {"rt": ip_net.record_type(), "ip": str(ip)}
    return Message(
        monitor_message=_monitor(responses, _UPDATE_MONITOR, **ctx),
        notifier_message=_notifier(responses, _UPDATE_NOTIFIER, **ctx),
    )


_DELETE_MONITOR = {
    ResponseCode.FAILED: "Failed to delete {rt} of {names}",
    ResponseCode.UPDATING: "Deleting {rt} of {names}",
    ResponseCode.UPDATED: "Deleted {rt} of {names}",
}
_DELETE_NOTIFIER = {
    ResponseCode.FAILED: ("Failed to properly delete {rt} records of {names}",) * 2,
    ResponseCode.UPDATING: ("Deleting {rt} records of {names}", "; deleting those of {names}"),
    ResponseCode.UPDATED: ("Deleted {rt} records of {names}", "; deleted those of {names}"),
}


def generate_final_delete_message(ip_net: IPNet, responses: SetterResponses) -> Message:
    """Build the message reporting the final deletion of DNS records."""
    ctx = {"rt": ip_net.record_type()}
    return Message(
        monitor_message=_monitor(responses, _DELETE_MONITOR, **ctx),
        notifier_message=_notifier(responses, _DELETE_NOTIFIER, **ctx),
    )


_WAF_UPDATE_MONITOR = {
    ResponseCode.FAILED: "Failed to set list(s) {names}",
    ResponseCode.UPDATING: "Setting list(s) {names}",
    ResponseCode.UPDATED: "Set list(s) {names}",
}
_WAF_UPDATE_NOTIFIER = {
    ResponseCode.FAILED: ("Failed to properly update WAF list(s) {names}",) * 2,
    ResponseCode.UPDATING: ("Updating WAF list(s) {names}", "; updating {names}"),
    ResponseCode.UPDATED: ("Updated WAF list(s) {names}", "; updated {names}"),
}


def generate_update_waf_lists_message(responses: SetterResponses) -> Message:
    """Build the message reporting the updates of WAF lists."""
    return Message(
        monitor_message=_monitor(responses, _WAF_UPDATE_MONITOR),
        notifier_message=_notifier(responses, _WAF_UPDATE_NOTIFIER),
    )


_WAF_CLEAR_MONITOR = {
    ResponseCode.FAILED: "Failed to clear list(s) {names}",
    ResponseCode.UPDATING: "Clearing list(s) {names}",
    ResponseCode.UPDATED: "Cleared list(s) {names}",
}
_WAF_CLEAR_NOTIFIER = {
    ResponseCode.FAILED: ("Failed to properly clear WAF list(s) {names}",) * 2,
    ResponseCode.UPDATING: ("Clearing WAF list(s) {names}", "; clearing {names}"),
    ResponseCode.UPDATED: ("Cleared WAF list(s) {names}", "; cleared {names}"),
}


def generate_final_clear_waf_lists_message(responses: SetterResponses) -> Message:
    """Build the message reporting the final clearing of WAF lists."""
    return Message(
        monitor_message=_monitor(responses, _WAF_CLEAR_MONITOR),
        notifier_message=_notifier(responses, _WAF_CLEAR_NOTIFIER),
    )