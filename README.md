# cfddns

This package holds the update logic for a dynamic DNS client. It does three
things:

- It asks your address providers for the current IPv4 and IPv6 addresses.
- It passes those addresses to your setter for every managed domain and WAF
  list.
- It sums up the outcome as short messages for a health monitor and for a
  notification service.

It needs only the Python standard library and runs on Python 3.10 or later.

## Modules

### `cfddns.updater`

`update_ips(ppfmt, config, setter)` runs one update:

1. For each family (`IPNet.IP4`, then `IPNet.IP6`) that has a provider in
   `config.providers`, it calls `provider.get_ip(deadline, ppfmt, ip_net)`.
   The call returns `(ip, ok)`.
2. For each detected address, it calls `setter.set(...)` for every domain in
   `config.domains[ip_net]`. The record settings go in as a `RecordParams`
   (`ttl`, `proxied`, `comment`).
3. It calls `setter.set_waf_list(...)` for every `WAFList` in
   `config.waf_lists`. This step is skipped when both families are managed
   and neither address was detected.
4. It calls `close_idle_connections()` on each provider that has that method.
5. It returns one merged `Message`.

`final_delete_ips(ppfmt, config, setter)` is meant for shutdown:

- It calls `setter.final_delete(...)` for the domains of every family that
  has a provider.
- It calls `setter.final_clear_waf_list(...)` for every WAF list.
- It returns the merged `Message`.

Each detection gets its own `Deadline`, and so does each update. The length
comes from `config.detection_timeout` or `config.update_timeout`, in seconds.
The defaults are 5 and 30. The deadline is handed to the provider or the
setter, and enforcing it is their job. Two hints are reported once through
`ppfmt.notice_oncef`:

- If a detection fails after its deadline has passed, the hint suggests
  raising `DETECTION_TIMEOUT`.
- If an update fails after its deadline has passed, the hint suggests
  raising `UPDATE_TIMEOUT`.

You pass in three plain objects:

- `ppfmt` has `infof`, `noticef`, `notice_oncef` and `suppress`. Log lines
  carry an `Emoji`, and one-time hints carry a `MessageID`.
- Each provider has `get_ip(deadline, ppfmt, ip_net)`.
- `setter` has `set`, `final_delete`, `set_waf_list` and
  `final_clear_waf_list`. Each returns a `ResponseCode`.

### `cfddns.messages`

- `Message` pairs a `MonitorMessage` (an `ok` flag and summary `lines`) with
  a list of notifier sentences.
- `merge_messages`, `merge_monitor_messages` and `merge_notifier_messages`
  combine messages. A merged monitor message keeps only the lines whose
  status matches the overall status.
- `SetterResponses` collects names grouped by `ResponseCode`, in the order
  they were registered.
- The functions below turn those groups into text:
  - `generate_detect_message`
  - `generate_update_message`
  - `generate_final_delete_message`
  - `generate_update_waf_lists_message`
  - `generate_final_clear_waf_lists_message`
- `join` and `english_join` format lists of names.

```python
from cfddns.messages import IPNet, ResponseCode, SetterResponses, generate_update_message

responses = SetterResponses()
responses.register("a.example", ResponseCode.UPDATED)
responses.register("b.example", ResponseCode.FAILED)

message = generate_update_message(IPNet.IP4, "192.0.2.1", responses)
message.monitor_message.ok     # False
message.monitor_message.lines  # ['Failed to set A (192.0.2.1) of b.example']
message.notifier_message
# ['Failed to properly update A records of b.example with 192.0.2.1; updated those of a.example.']
```

### `cfddns.signals`

- `setup()` installs handlers for SIGINT and SIGTERM and returns a
  `SignalHandle`. Call it from the main thread.
- `SignalHandle.wait_for_signals_until(ppfmt, until)` waits until `until`,
  given as a `datetime` or as a Unix timestamp. It returns `True` if a
  caught signal ends the wait early, and reports that signal through
  `ppfmt.noticef`. Otherwise it returns `False`.
- `SignalHandle.close()` puts back the handlers that were there before. The
  handle also works as a context manager.
- `notify_event()` returns an event and a cancel function. Either signal sets
  the event. The cancel function also sets it and restores the earlier
  handlers.

## What it does not do

This package does not include:

- address providers that query the network
- a client for a DNS provider's API
- reading settings from the environment
- a pretty-printer for log output
- a command or a scheduling loop

You supply the providers, the setter and `ppfmt` yourself, and you build a
`Config` in code.

## Running the tests

```
pip install -e ".[test]"
pytest
```