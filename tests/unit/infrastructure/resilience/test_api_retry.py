import asyncio

import pytest

from conftest import FakeResponse, ScriptedTransport
from yamnet.domain.events.api_events import (
    RateLimitObserved, RequestAttempted, RequestFailed, RequestSucceeded, RetryScheduled,
)
from yamnet.domain.models.common import RetryPolicy
from yamnet.domain.models.envelope import ErrorKind
from yamnet.domain.models.errors import NameResolutionFault, NetworkFault
from yamnet.infrastructure.resilience.api_retry import RetryExecutionEngine


def make_engine(transport, sleep, policy=None, events=None):
    return RetryExecutionEngine(
        transport,
        policy=policy or RetryPolicy(),
        event_sink=events.append if events is not None else None,
        sleep=sleep,
    )


@pytest.mark.asyncio
async def test_immediate_success_makes_one_attempt(sample_request, recording_sleep):
    transport = ScriptedTransport([200])
    outcome = await make_engine(transport, recording_sleep).execute(sample_request)

    assert transport.attempts == 1
    assert outcome.attempts == 1
    assert outcome.failure is None
    assert outcome.response.status_code == 200
    assert recording_sleep.delays == []
    # The success response is handed over unreleased; the handler owns it.
    assert transport.responses[0].close_count == 0


@pytest.mark.asyncio
async def test_rate_limited_four_times_then_success(sample_request, recording_sleep):
    events = []
    transport = ScriptedTransport([429, 429, 429, 429, 200])
    outcome = await make_engine(transport, recording_sleep, events=events).execute(sample_request)

    assert transport.attempts == 5
    assert outcome.response.status_code == 200
    assert recording_sleep.delays == [10.0, 10.0, 10.0, 10.0]
    assert len([e for e in events if isinstance(e, RateLimitObserved)]) == 4
    assert len([e for e in events if isinstance(e, RetryScheduled)]) == 4
    assert isinstance(events[-1], RequestSucceeded)
    assert events[-1].attempts == 5


@pytest.mark.asyncio
async def test_first_unauthorized_retries_after_one_millisecond(sample_request, recording_sleep):
    transport = ScriptedTransport([401, 200])
    outcome = await make_engine(transport, recording_sleep).execute(sample_request)

    assert transport.attempts == 2
    assert outcome.response.status_code == 200
    assert recording_sleep.delays == [0.001]


@pytest.mark.asyncio
async def test_repeated_unauthorized_falls_back_to_base_delay(sample_request, recording_sleep):
    transport = ScriptedTransport([401, 401, 200])
    outcome = await make_engine(transport, recording_sleep).execute(sample_request)

    assert transport.attempts == 3
    assert outcome.response.status_code == 200
    assert recording_sleep.delays == [0.001, 10.0]


@pytest.mark.parametrize("status", [500, 503, 404, 429, 401])
@pytest.mark.asyncio
async def test_exhausted_attempts_return_last_response(sample_request, recording_sleep, status):
    events = []
    transport = ScriptedTransport([status] * 5)
    outcome = await make_engine(transport, recording_sleep, events=events).execute(sample_request)

    assert transport.attempts == 5
    assert outcome.attempts == 5
    assert outcome.failure is None
    assert outcome.response is transport.responses[-1]
    assert outcome.response.status_code == status
    # No sleep after the final attempt.
    assert len(recording_sleep.delays) == 4
    # Classification (and its RequestFailed event) happens in the service client.
    assert not [e for e in events if isinstance(e, RequestFailed)]


@pytest.mark.asyncio
async def test_intermediate_responses_released_before_next_attempt(sample_request, recording_sleep):
    transport = ScriptedTransport([500, 502, 200])
    await make_engine(transport, recording_sleep).execute(sample_request)

    first, second, final = transport.responses
    assert first.close_count == 1
    assert second.close_count == 1
    assert final.close_count == 0


@pytest.mark.asyncio
async def test_release_error_between_attempts_does_not_abort(sample_request, recording_sleep):
    failing_release = FakeResponse(503, close_error=NetworkFault("connection reset while draining"))
    transport = ScriptedTransport([failing_release, 200])
    outcome = await make_engine(transport, recording_sleep).execute(sample_request)

    assert transport.attempts == 2
    assert outcome.failure is None
    assert outcome.response.status_code == 200
    assert failing_release.close_count == 1


@pytest.mark.asyncio
async def test_name_resolution_fault_is_not_retried(sample_request, recording_sleep):
    fault = NameResolutionFault("[Errno -2] Name or service not known", sample_request.url)
    transport = ScriptedTransport([fault, 200])
    outcome = await make_engine(transport, recording_sleep).execute(sample_request)

    assert transport.attempts == 1
    assert recording_sleep.delays == []
    assert outcome.response is None
    assert outcome.failure.kind is ErrorKind.NETWORK_UNAVAILABLE
    assert outcome.failure.cause is fault
    assert outcome.failure.attempts == 1


@pytest.mark.asyncio
async def test_network_fault_after_retry_aborts_with_unknown(sample_request, recording_sleep):
    fault = NetworkFault("ConnectError: connection refused", sample_request.url)
    transport = ScriptedTransport([503, fault, 200])
    outcome = await make_engine(transport, recording_sleep).execute(sample_request)

    assert transport.attempts == 2
    assert outcome.failure.kind is ErrorKind.UNKNOWN
    assert outcome.failure.cause is fault
    assert outcome.failure.attempts == 2


@pytest.mark.asyncio
async def test_unexpected_exception_is_captured(sample_request, recording_sleep):
    transport = ScriptedTransport([RuntimeError("boom")])
    outcome = await make_engine(transport, recording_sleep).execute(sample_request)

    assert outcome.failure.kind is ErrorKind.UNKNOWN
    assert isinstance(outcome.failure.cause, RuntimeError)
    assert "boom" in outcome.failure.message


@pytest.mark.asyncio
async def test_custom_policy_limits_attempts(sample_request, recording_sleep):
    policy = RetryPolicy(max_attempts=2, base_delay=0.5)
    transport = ScriptedTransport([500, 500, 200])
    outcome = await make_engine(transport, recording_sleep, policy=policy).execute(sample_request)

    assert transport.attempts == 2
    assert outcome.response.status_code == 500
    assert recording_sleep.delays == [0.5]


@pytest.mark.asyncio
async def test_attempt_events_are_numbered(sample_request, recording_sleep):
    events = []
    transport = ScriptedTransport([500, 200])
    await make_engine(transport, recording_sleep, events=events).execute(sample_request)

    attempts = [e.attempt_number for e in events if isinstance(e, RequestAttempted)]
    assert attempts == [1, 2]


@pytest.mark.asyncio
async def test_failing_event_sink_does_not_change_outcome(sample_request, recording_sleep):
    def broken_sink(event):
        raise ValueError("sink down")

    transport = ScriptedTransport([200])
    engine = RetryExecutionEngine(transport, event_sink=broken_sink, sleep=recording_sleep)
    outcome = await engine.execute(sample_request)

    assert outcome.response.status_code == 200


@pytest.mark.asyncio
async def test_cancel_event_already_set_aborts_before_sending(sample_request, recording_sleep):
    cancel = asyncio.Event()
    cancel.set()
    transport = ScriptedTransport([200])
    outcome = await make_engine(transport, recording_sleep).execute(sample_request, cancel_event=cancel)

    assert transport.attempts == 0
    assert outcome.failure.kind is ErrorKind.CANCELLED


@pytest.mark.asyncio
async def test_cancel_during_retry_delay(sample_request):
    cancel = asyncio.Event()

    async def sleep_then_cancel(delay):
        cancel.set()
        await asyncio.sleep(3600)

    transport = ScriptedTransport([503, 200])
    engine = RetryExecutionEngine(transport, sleep=sleep_then_cancel)
    outcome = await asyncio.wait_for(engine.execute(sample_request, cancel_event=cancel), timeout=5)

    assert transport.attempts == 1
    assert outcome.failure.kind is ErrorKind.CANCELLED
    assert outcome.failure.attempts == 1
    assert transport.responses[0].close_count == 1


@pytest.mark.asyncio
async def test_cancel_during_send(sample_request, recording_sleep):
    cancel = asyncio.Event()

    class HangingTransport(ScriptedTransport):
        async def send(self, request):
            self.requests.append(request)
            cancel.set()
            await asyncio.sleep(3600)

    transport = HangingTransport([])
    engine = make_engine(transport, recording_sleep)
    outcome = await asyncio.wait_for(engine.execute(sample_request, cancel_event=cancel), timeout=5)

    assert transport.attempts == 1
    assert outcome.failure.kind is ErrorKind.CANCELLED
    assert recording_sleep.delays == []


def test_compute_delay_table():
    engine = RetryExecutionEngine(ScriptedTransport([]), policy=RetryPolicy())
    assert engine.compute_delay(401, 1) == 0.001
    assert engine.compute_delay(401, 2) == 10.0
    assert engine.compute_delay(429, 1) == 10.0
    assert engine.compute_delay(500, 3) == 10.0


def test_retry_policy_rejects_invalid_values():
    with pytest.raises(ValueError):
        RetryPolicy(max_attempts=0)
    with pytest.raises(ValueError):
        RetryPolicy(base_delay=-1)
