import logging
from datetime import datetime, timezone

import pytest

from levelmon.collector.errors import FatalSamplingError
from levelmon.collector.readers import SensorReader, SimulatedReader
from levelmon.collector.sampler import MAX_SLEEP_MILLISEC, Sampler, StopReason, take_collection
from levelmon.shared.models import Reading, SHUTDOWN, ThreadMessage


class SequenceReader(SensorReader):
    def __init__(self, values):
        self.values = list(values)

    def sample(self) -> float:
        return self.values.pop(0)

    def check_health(self) -> bool:
        return True


class FailingReader(SensorReader):
    def sample(self) -> float:
        raise FatalSamplingError("sensor stopped responding")

    def check_health(self) -> bool:
        return True


class UnhealthyReader(SimulatedReader):
    def check_health(self) -> bool:
        return False


def _drain(channel):
    items = []
    while True:
        item = channel.try_recv()
        if item is None:
            return items
        items.append(item)


def test_take_collection_matches_calibrated_example(settings) -> None:
    reader = SimulatedReader(4.07)

    assert take_collection(settings, reader) == pytest.approx(4.00)
    assert reader.samples_taken == 3


@pytest.mark.parametrize("samples", [1, 2, 7, 255])
def test_take_collection_subtracts_offset_as_milliseconds(make_settings, samples) -> None:
    settings = make_settings(samples_per_collection=samples, calibration_microsec=250.0)

    assert take_collection(settings, SimulatedReader(10.0)) == pytest.approx(9.75)


def test_take_collection_without_offset_is_the_mean(make_settings) -> None:
    settings = make_settings(samples_per_collection=4, calibration_microsec=0.0)

    result = take_collection(settings, SequenceReader([1.0, 2.0, 3.0, 6.0]))

    assert result == pytest.approx(3.0)


def test_take_collection_rejects_real_sensor(make_settings) -> None:
    settings = make_settings(simulate_sensor=False)
    reader = SimulatedReader()

    with pytest.raises(FatalSamplingError, match="real sensors not yet supported"):
        take_collection(settings, reader)
    assert reader.samples_taken == 0


def test_take_collection_rejects_zero_samples(make_settings) -> None:
    settings = make_settings(samples_per_collection=0)

    with pytest.raises(FatalSamplingError, match="must be positive"):
        take_collection(settings, SimulatedReader())


def test_terminate_request_stops_after_current_cycle(settings, readings, termination) -> None:
    termination.send(ThreadMessage.TERMINATE)
    clock_time = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    sampler = Sampler(
        settings, SimulatedReader(), readings, termination,
        sleep=lambda _: None, clock=lambda: clock_time,
    )

    assert sampler.run() is StopReason.TERMINATED

    items = _drain(readings)
    assert len(items) == 2
    assert isinstance(items[0], Reading)
    assert items[0].value == pytest.approx(4.00)
    assert items[0].captured_at == clock_time
    assert items[1] is SHUTDOWN


def test_closed_termination_channel_counts_as_shutdown(settings, readings, termination, caplog) -> None:
    termination.close()
    sampler = Sampler(settings, SimulatedReader(), readings, termination, sleep=lambda _: None)

    with caplog.at_level(logging.WARNING):
        assert sampler.run() is StopReason.DISCONNECTED

    items = _drain(readings)
    assert items[-1] is SHUTDOWN
    assert len(items) == 2
    assert any("sender went away" in record.getMessage() for record in caplog.records)


def test_cycle_limit_bounds_readings(make_settings, readings, termination) -> None:
    settings = make_settings(max_cycles=5)
    sleeps = []
    sampler = Sampler(settings, SimulatedReader(), readings, termination, sleep=sleeps.append)

    assert sampler.run() is StopReason.CYCLE_LIMIT

    items = _drain(readings)
    assert len(items) == 6
    assert all(isinstance(item, Reading) for item in items[:5])
    assert items[5] is SHUTDOWN
    # No idle wait after the final cycle
    assert len(sleeps) == 4


def test_idle_wait_uses_configured_delay(make_settings, readings, termination) -> None:
    settings = make_settings(millisec_between_readings=250, max_cycles=2)
    sleeps = []
    Sampler(settings, SimulatedReader(), readings, termination, sleep=sleeps.append).run()

    assert sleeps == [0.25]


def test_sampling_failure_still_sends_shutdown_marker(settings, readings, termination) -> None:
    sampler = Sampler(settings, FailingReader(), readings, termination, sleep=lambda _: None)

    with pytest.raises(FatalSamplingError, match="stopped responding"):
        sampler.run()

    assert _drain(readings) == [SHUTDOWN]


def test_unsupported_sensor_produces_no_readings(make_settings, readings, termination) -> None:
    sampler = Sampler(
        make_settings(simulate_sensor=False), SimulatedReader(), readings, termination,
        sleep=lambda _: None,
    )

    with pytest.raises(FatalSamplingError):
        sampler.run()

    assert _drain(readings) == [SHUTDOWN]


def test_enqueue_failure_is_fatal(settings, readings, termination, caplog) -> None:
    readings.close()
    sampler = Sampler(settings, SimulatedReader(), readings, termination, sleep=lambda _: None)

    with caplog.at_level(logging.WARNING):
        with pytest.raises(FatalSamplingError, match="receiver went away"):
            sampler.run()

    assert sampler.cycles == 0
    assert any("writer already stopped" in record.getMessage() for record in caplog.records)


def test_unhealthy_reader_fails_before_sampling(settings, readings, termination) -> None:
    reader = UnhealthyReader()
    sampler = Sampler(settings, reader, readings, termination, sleep=lambda _: None)

    with pytest.raises(FatalSamplingError, match="UnhealthyReader failed its health check"):
        sampler.run()

    assert reader.samples_taken == 0
    assert _drain(readings) == [SHUTDOWN]


def test_long_idle_wait_is_split_into_bounded_sleeps(make_settings, readings, termination) -> None:
    settings = make_settings(millisec_between_readings=2 * MAX_SLEEP_MILLISEC + 500, max_cycles=2)
    sleeps = []
    Sampler(settings, SimulatedReader(), readings, termination, sleep=sleeps.append).run()

    assert sleeps == [86400.0, 86400.0, 0.5]


class StopSleeping(Exception):
    pass


def test_largest_configured_wait_never_oversleeps(make_settings, readings, termination) -> None:
    settings = make_settings(millisec_between_readings=2**64 - 1)
    sleeps = []

    def sleep(seconds):
        sleeps.append(seconds)
        if len(sleeps) == 3:
            raise StopSleeping()

    sampler = Sampler(settings, SimulatedReader(), readings, termination, sleep=sleep)

    with pytest.raises(StopSleeping):
        sampler.run()

    # Every chunk stays far below the platform sleep limit
    assert sleeps == [MAX_SLEEP_MILLISEC / 1000.0] * 3
    assert _drain(readings)[-1] is SHUTDOWN
