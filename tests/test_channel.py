import threading

import pytest

from levelmon.shared.channel import Channel, ChannelDisconnected


def test_items_come_out_in_send_order() -> None:
    channel = Channel()
    for value in range(5):
        channel.send(value)

    assert len(channel) == 5
    assert [channel.recv() for _ in range(5)] == [0, 1, 2, 3, 4]


def test_try_recv_returns_none_when_empty() -> None:
    channel = Channel()

    assert channel.try_recv() is None


def test_try_recv_raises_once_closed_and_drained() -> None:
    channel = Channel()
    channel.send("last")
    channel.close()

    assert channel.try_recv() == "last"
    with pytest.raises(ChannelDisconnected):
        channel.try_recv()


def test_send_after_close_fails() -> None:
    channel = Channel("reading queue")
    channel.close()

    with pytest.raises(ChannelDisconnected, match="reading queue"):
        channel.send(1)


def test_close_wakes_blocked_receiver() -> None:
    channel = Channel()
    outcome = []

    def receive():
        try:
            channel.recv()
        except ChannelDisconnected:
            outcome.append("disconnected")

    thread = threading.Thread(target=receive)
    thread.start()
    channel.close()
    thread.join(timeout=2)

    assert not thread.is_alive()
    assert outcome == ["disconnected"]


def test_blocked_receiver_gets_item_from_other_thread() -> None:
    channel = Channel()
    received = []
    thread = threading.Thread(target=lambda: received.append(channel.recv()))
    thread.start()

    channel.send(42)
    thread.join(timeout=2)

    assert received == [42]
