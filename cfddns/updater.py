"""Detection of IP addresses and updating of DNS records and WAF lists."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field
from ipaddress import IPv4Address, IPv6Address
from typing import Any, Callable, Optional, Protocol, Union

from cfddns.messages import (
    IPNet,
    Message,
    ResponseCode,
    SetterResponses,
    generate_detect_message,
    generate_final_clear_waf_lists_message,
    generate_final_delete_message,
    generate_update_message,
    generate_update_waf_lists_message,
    merge_messages,
)

Address = Union[IPv4Address, IPv6Address]

TTL_AUTO = 1
"""The TTL value that lets the DNS service choose."""

MANUAL_URL = "README.markdown"
"""Where the setup instructions live."""


class Emoji(str, enum.Enum):
    """Emojis prefixed to log lines."""

    INTERNET = "🌐"
    ERROR = "😡"
    HINT = "💡"


class MessageID(enum.Enum):
    """Identifiers of hints that are shown at most once."""

    IP4_DETECTION_FAILS = enum.auto()
    IP6_DETECTION_FAILS = enum.auto()
    DETECTION_TIMEOUTS = enum.auto()
    UPDATE_TIMEOUTS = enum.auto()


_DETECTION_MESSAGE_IDS = {
    IPNet.IP4: MessageID.IP4_DETECTION_FAILS,
    IPNet.IP6: MessageID.IP6_DETECTION_FAILS,
}


class PP(Protocol):
    def infof(self, emoji: Emoji, fmt: str, *args: Any) -> None: ...

    def noticef(self, emoji: Emoji, fmt: str, *args: Any) -> None: ...

    def notice_oncef(self, message_id: MessageID, emoji: Emoji, fmt: str, *args: Any) -> None: ...

    def suppress(self, message_id: MessageID) -> None: ...


@dataclass(frozen=True)
class Deadline:
    """A point in monotonic time after which an operation has timed out."""

    at: float

    @classmethod
    def after(cls, seconds: float) -> Deadline:
        return cls(time.monotonic() + seconds)

    def expired(self) -> bool:
        return time.monotonic() >= self.at

    def remaining(self) -> float:
        return max(0.0, self.at - time.monotonic())


@dataclass(frozen=True)
class RecordParams:
    """Settings applied to each DNS record."""

    ttl: int = TTL_AUTO
    proxied: bool = False
    comment: str = ""


@dataclass(frozen=True)
class WAFList:
    """A WAF list identified by its account and name."""

    account_id: str
    name: str

    def describe(self) -> str:
        return f"{self.account_id}/{self.name}"


class Provider(Protocol):
    def get_ip(self, deadline: Deadline, ppfmt: PP, ip_net: IPNet) -> tuple[Optional[Address], bool]: ...


class Setter(Protocol):
    def set(
        self, deadline: Deadline, ppfmt: PP, ip_net: IPNet, domain: str, ip: Address, params: RecordParams
    ) -> ResponseCode: ...

    def final_delete(
        self, deadline: Deadline, ppfmt: PP, ip_net: IPNet, domain: str, params: RecordParams
    ) -> ResponseCode: ...

    def set_waf_list(
        self,
        deadline: Deadline,
        ppfmt: PP,
        waf_list: WAFList,
        description: str,
        detected_ip: dict[IPNet, Optional[Address]],
        item_comment: str,
    ) -> ResponseCode: ...

    def final_clear_waf_list(
        self, deadline: Deadline, ppfmt: PP, waf_list: WAFList, description: str
    ) -> ResponseCode: ...


def _no_providers() -> dict[IPNet, Any]:
    return {IPNet.IP4: None, IPNet.IP6: None}


@dataclass
class Config:
    """The settings the updater works from."""

    providers: dict[IPNet, Optional[Provider]] = field(default_factory=_no_providers)
    domains: dict[IPNet, list[str]] = field(default_factory=dict)
    proxied: dict[str, bool] = field(default_factory=dict)
    ttl: int = TTL_AUTO
    record_comment: str = ""
    waf_lists: list[WAFList] = field(default_factory=list)
    waf_list_description: str = ""
    detection_timeout: float = 5.0
    update_timeout: float = 30.0


def _format_duration(seconds: float) -> str:
    return f"{seconds:g}s"


def _active_providers(config: Config):
    for ip_net in IPNet:
        provider = config.providers.get(ip_net)
        if provider is not None:
            yield ip_net, provider


def _record_params(config: Config, domain: str) -> RecordParams:
    return RecordParams(
        ttl=config.ttl,
        proxied=config.proxied.get(domain, False),
        comment=config.record_comment,
    )


def _detect_ip(ppfmt: PP, config: Config, ip_net: IPNet, provider: Provider) -> tuple[Optional[Address], Message]:
    deadline = Deadline.after(config.detection_timeout)
    ip, ok = provider.get_ip(deadline, ppfmt, ip_net)

    if ok:
        ppfmt.infof(Emoji.INTERNET, "Detected the %s address %s", ip_net.describe(), ip)
        ppfmt.suppress(_DETECTION_MESSAGE_IDS[ip_net])
    else:
        ppfmt.noticef(Emoji.ERROR, "Failed to detect the %s address", ip_net.describe())
        if ip_net is IPNet.IP6:
            ppfmt.notice_oncef(
                _DETECTION_MESSAGE_IDS[ip_net],
                Emoji.HINT,
                "If you are using Docker or Kubernetes, IPv6 might need extra setup. Read more at %s. "
                "If your network doesn't support IPv6, you can turn it off by setting IP6_PROVIDER=none",
                MANUAL_URL,
            )
        else:
            ppfmt.notice_oncef(
                _DETECTION_MESSAGE_IDS[ip_net],
                Emoji.HINT,
                "If your network does not support IPv4, you can disable it with IP4_PROVIDER=none",
            )
        if deadline.expired():
            ppfmt.notice_oncef(
                MessageID.DETECTION_TIMEOUTS,
                Emoji.HINT,
                "If your network is experiencing high latency, consider increasing DETECTION_TIMEOUT=%s",
                _format_duration(config.detection_timeout),
            )

    return (ip if ok else None), generate_detect_message(ip_net, ok)


def _with_update_timeout(ppfmt: PP, config: Config, action: Callable[[Deadline], ResponseCode]) -> ResponseCode:
    deadline = Deadline.after(config.update_timeout)
    response = action(deadline)
    if response is ResponseCode.FAILED and deadline.expired():
        ppfmt.notice_oncef(
            MessageID.UPDATE_TIMEOUTS,
            Emoji.HINT,
            "If your network is experiencing high latency, consider increasing UPDATE_TIMEOUT=%s",
            _format_duration(config.update_timeout),
        )
    return response


def _set_ip(ppfmt: PP, config: Config, setter: Setter, ip_net: IPNet, ip: Address) -> Message:
    responses = SetterResponses()
    for domain in config.domains.get(ip_net, []):
        params = _record_params(config, domain)
        code = _with_update_timeout(
            ppfmt, config, lambda d: setter.set(d, ppfmt, ip_net, domain, ip, params)
        )
        responses.register(str(domain), code)
    return generate_update_message(ip_net, ip, responses)


def _final_delete_ip(ppfmt: PP, config: Config, setter: Setter, ip_net: IPNet) -> Message:
    responses = SetterResponses()
    for domain in config.domains.get(ip_net, []):
        params = _record_params(config, domain)
        code = _with_update_timeout(
            ppfmt, config, lambda d: setter.final_delete(d, ppfmt, ip_net, domain, params)
        )
        responses.register(str(domain), code)
    return generate_final_delete_message(ip_net, responses)


def _set_waf_lists(
    ppfmt: PP, config: Config, setter: Setter, detected_ip: dict[IPNet, Optional[Address]]
) -> Message:
    responses = SetterResponses()
    for waf_list in config.waf_lists:
        code = _with_update_timeout(
            ppfmt,
            config,
            lambda d: setter.set_waf_list(d, ppfmt, waf_list, config.waf_list_description, detected_ip, ""),
        )
        responses.register(waf_list.describe(), code)
    return generate_update_waf_lists_message(responses)


def _final_clear_waf_lists(ppfmt: PP, config: Config, setter: Setter) -> Message:
    responses = SetterResponses()
    for waf_list in config.waf_lists:
        code = _with_update_timeout(
            ppfmt,
            config,
            lambda d: setter.final_clear_waf_list(d, ppfmt, waf_list, config.waf_list_description),
        )
        responses.register(waf_list.describe(), code)
    return generate_final_clear_waf_lists_message(responses)


def _close_idle_connections(config: Config) -> None:
    for _, provider in _active_providers(config):
        close = getattr(provider, "close_idle_connections", None)
        if callable(close):
            close()


def update_ips(ppfmt: PP, config: Config, setter: Setter) -> Message:
    """Detect IP addresses and update the DNS records and WAF lists."""
    messages: list[Message] = []
    detected_ip: dict[IPNet, Optional[Address]] = {}
    managed = 0
    valid = 0

    for ip_net, provider in _active_providers(config):
        managed += 1
        ip, message = _detect_ip(ppfmt, config, ip_net, provider)
        detected_ip[ip_net] = ip
        messages.append(message)
        # Without a detected address, existing records are left alone.
        if message.monitor_message.ok:
            valid += 1
            messages.append(_set_ip(ppfmt, config, setter, ip_net, ip))

    _close_idle_connections(config)

    if not (managed == 2 and valid == 0):
        messages.append(_set_waf_lists(ppfmt, config, setter, detected_ip))

    return merge_messages(*messages)


def final_delete_ips(ppfmt: PP, config: Config, setter: Setter) -> Message:
    """Remove all DNS records of managed domains and clear the WAF lists."""
    messages = [_final_delete_ip(ppfmt, config, setter, ip_net) for ip_net, _ in _active_providers(config)]
    messages.append(_final_clear_waf_lists(ppfmt, config, setter))
    return merge_messages(*messages)