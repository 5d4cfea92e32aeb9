import sys

from memmonitor.consts.AlertLevel import AlertLevel
from memmonitor.service.alert.alert_engine import AlertEngine, evaluate


class CountingCollect:
    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return 7


def test_evaluate_is_strictly_above_threshold(make_sample):
    assert evaluate(make_sample(current=100), 100) is AlertLevel.NORMAL
    assert evaluate(make_sample(current=101), 100) is AlertLevel.THRESHOLD_EXCEEDED
    assert evaluate(make_sample(current=99), 100) is AlertLevel.NORMAL


def test_zero_threshold_alerts_on_any_usage(make_sample):
    assert evaluate(make_sample(current=1), 0) is AlertLevel.THRESHOLD_EXCEEDED


def test_identical_samples_alert_every_time(make_sample, reporter, caplog):
    collect = CountingCollect()
    engine = AlertEngine(threshold_bytes=10, reporter=reporter, corrective_action=True, collect=collect)

    for _ in range(3):
        assert engine.handle(make_sample(current=20)) is AlertLevel.THRESHOLD_EXCEEDED

    assert engine.dispatch_count == 3
    assert collect.calls == 3
    warnings = [r for r in caplog.records if "exceeds threshold" in r.getMessage()]
    assert len(warnings) == 3
    assert all(r.levelname == "WARNING" for r in warnings)
    assert "Garbage collection triggered (7 objects collected)" in caplog.text


def test_normal_sample_dispatches_nothing(make_sample, reporter, caplog):
    collect = CountingCollect()
    engine = AlertEngine(threshold_bytes=10, reporter=reporter, corrective_action=True, collect=collect)

    assert engine.handle(make_sample(current=5)) is AlertLevel.NORMAL
    assert collect.calls == 0
    assert caplog.text == ""


def test_no_corrective_action_when_monitoring_a_child(make_sample, reporter, caplog):
    collect = CountingCollect()
    engine = AlertEngine(threshold_bytes=10, reporter=reporter, corrective_action=False, collect=collect)

    engine.handle(make_sample(current=20))

    assert collect.calls == 0
    assert engine.dispatch_count == 0
    assert "exceeds threshold" in caplog.text


def test_alert_script_runs_on_alert(make_sample, reporter, tmp_path):
    marker = tmp_path / "alerted"
    script = f'"{sys.executable}" -c "open(r\'{marker}\', \'a\').write(\'x\')"'
    engine = AlertEngine(threshold_bytes=10, reporter=reporter, alert_script=script)

    engine.handle(make_sample(current=20))
    engine.handle(make_sample(current=20))

    assert marker.read_text() == "xx"


def test_failing_alert_script_is_reported(make_sample, reporter, caplog):
    script = f'"{sys.executable}" -c "import sys; sys.exit(4)"'
    engine = AlertEngine(threshold_bytes=10, reporter=reporter, alert_script=script)

    assert engine.handle(make_sample(current=20)) is AlertLevel.THRESHOLD_EXCEEDED

    errors = [r for r in caplog.records if r.levelname == "ERROR"]
    assert len(errors) == 1
    assert "exit code 4" in errors[0].getMessage()
