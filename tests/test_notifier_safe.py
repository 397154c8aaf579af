def test_notifier_never_raises(monkeypatch):
    from catpoint.notify import Notifier

    def boom(*a, **k):
        raise RuntimeError("fail")

    monkeypatch.setattr("requests.post", boom)

    n = Notifier(enabled=True, pushover_token="t", pushover_user="u")

    # Call the sync path to deterministically exercise exception handling.
    assert n._send_sync("t", "m", 1) is False


def test_notifier_disabled_without_credentials():
    from catpoint.notify import Notifier

    assert Notifier(enabled=True, pushover_token=None, pushover_user="u").enabled is False
    assert Notifier(enabled=False, pushover_token="t", pushover_user="u").enabled is False
