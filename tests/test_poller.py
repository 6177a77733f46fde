import threading

import pytest

from gkeops.errors import OperationFailed, OperationTimeout
from gkeops.provisioning.poller import OperationPoller, Phase, classify
from gkeops.schemas.resources import OperationHandle, OperationState

HANDLE = OperationHandle(name="op-1", project_id="p", location="us-central1")


def make_gateway(mocker, *statuses, error=""):
    gw = mocker.Mock()
    gw.get_operation.side_effect = [
        OperationState(name="op-1", status=s, error=error) for s in statuses
    ]
    return gw


def make_poller(gw, **kwargs):
    sleeps = []
    poller = OperationPoller(gw, interval=2, sleep=sleeps.append, **kwargs)
    return poller, sleeps


@pytest.mark.parametrize(
    "status, error, phase",
    [
        ("DONE", "", Phase.SUCCEEDED),
        ("DONE", "quota exceeded", Phase.FAILED),
        ("ABORTING", "", Phase.FAILED),
        ("RUNNING", "", Phase.IN_PROGRESS),
        ("PENDING", "", Phase.IN_PROGRESS),
        ("STATUS_UNSPECIFIED", "", Phase.IN_PROGRESS),
        ("SOMETHING_NEW", "", Phase.IN_PROGRESS),
    ],
)
def test_classify(status, error, phase):
    assert classify(OperationState(name="op", status=status, error=error)) is phase


def test_wait_polls_until_done(mocker):
    gw = make_gateway(mocker, "RUNNING", "RUNNING", "DONE")
    poller, sleeps = make_poller(gw)

    assert poller.wait(HANDLE) == "DONE"
    assert gw.get_operation.call_count == 3
    assert sleeps == [2, 2]
    gw.get_operation.assert_called_with(
        "projects/p/locations/us-central1/operations/op-1"
    )


def test_wait_uses_per_call_interval(mocker):
    gw = make_gateway(mocker, "RUNNING", "DONE")
    poller, sleeps = make_poller(gw)

    poller.wait(HANDLE, interval=7)
    assert sleeps == [7]


def test_wait_raises_on_aborting(mocker):
    gw = make_gateway(mocker, "RUNNING", "ABORTING")
    poller, _ = make_poller(gw)

    with pytest.raises(OperationFailed) as exc:
        poller.wait(HANDLE)
    assert not isinstance(exc.value, OperationTimeout)
    assert exc.value.status == "ABORTING"
    assert gw.get_operation.call_count == 2


def test_wait_raises_on_done_with_error(mocker):
    gw = make_gateway(mocker, "DONE", error="node pool creation failed")
    poller, _ = make_poller(gw)

    with pytest.raises(OperationFailed, match="node pool creation failed"):
        poller.wait(HANDLE)


def test_unknown_status_keeps_polling(mocker):
    gw = make_gateway(mocker, "RECONCILING", "DONE")
    poller, _ = make_poller(gw)

    assert poller.wait(HANDLE) == "DONE"
    assert gw.get_operation.call_count == 2


def test_attempt_cap_raises_timeout(mocker):
    gw = make_gateway(mocker, "RUNNING", "RUNNING", "RUNNING")
    poller, _ = make_poller(gw, max_attempts=2)

    with pytest.raises(OperationTimeout) as exc:
        poller.wait(HANDLE)
    assert exc.value.status == "RUNNING"
    assert gw.get_operation.call_count == 2


def test_cancel_event_stops_polling(mocker):
    gw = make_gateway(mocker, "RUNNING", "RUNNING")
    poller, _ = make_poller(gw)
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(OperationTimeout):
        poller.wait(HANDLE, cancel=cancel)
    assert gw.get_operation.call_count == 1


def test_gateway_errors_propagate(mocker):
    gw = mocker.Mock()
    gw.get_operation.side_effect = RuntimeError("boom")
    poller, _ = make_poller(gw)

    with pytest.raises(RuntimeError, match="boom"):
        poller.wait(HANDLE)


class SetDuringWait(threading.Event):
    """Event that gets set while the poller is waiting between checks."""

    def __init__(self):
        super().__init__()
        self.waits = []

    def wait(self, timeout=None):
        self.waits.append(timeout)
        self.set()
        return True


def test_cancel_during_wait_stops_without_another_poll(mocker):
    gw = make_gateway(mocker, "RUNNING", "RUNNING", "DONE")
    poller, sleeps = make_poller(gw)
    cancel = SetDuringWait()

    with pytest.raises(OperationTimeout, match="polling cancelled"):
        poller.wait(HANDLE, cancel=cancel)

    assert gw.get_operation.call_count == 1
    assert cancel.waits == [2]
    assert sleeps == []


def test_cancel_event_from_constructor(mocker):
    gw = make_gateway(mocker, "RUNNING", "DONE")
    cancel = SetDuringWait()
    poller = OperationPoller(gw, interval=3, cancel=cancel)

    with pytest.raises(OperationTimeout):
        poller.wait(HANDLE)
    assert cancel.waits == [3]


def test_unset_cancel_event_waits_on_the_event(mocker):
    gw = make_gateway(mocker, "RUNNING", "DONE")
    cancel = mocker.Mock()
    cancel.is_set.return_value = False
    poller, sleeps = make_poller(gw, cancel=cancel)

    assert poller.wait(HANDLE) == "DONE"
    cancel.wait.assert_called_once_with(2)
    assert sleeps == []
