import json
from datetime import date

import pytest

from checkin_queue.core.exceptions import StorageError
from checkin_queue.core.storage import DailyStore
from checkin_queue.models.appointment import Appointment, HistoryAction, HistoryEntry

from conftest import at

DAY = date(2024, 5, 20)


def make_appointment(idx: int, **overrides) -> Appointment:
    fields = dict(
        id=str(1716166800000 + idx),
        name="张三",
        phone="13800138000",
        license_plate=f"京A1234{idx}",
        timestamp=at(9, idx),
    )
    fields.update(overrides)
    return Appointment(**fields)


def test_load_day_missing_file_is_empty(store):
    assert store.load_day(DAY) == []


def test_save_day_creates_directory_and_uses_camel_case(store, data_dir):
    store.save_day(DAY, [make_appointment(1)])

    path = data_dir / "appointments_2024-05-20.json"
    assert path.exists()
    raw = path.read_text(encoding="utf-8")
    assert "张三" in raw
    record = json.loads(raw)[0]
    assert record["licensePlate"] == "京A12341"
    assert record["isOutbound"] is False
    assert record["outboundTime"] is None


def test_save_then_load_round_trip(store):
    appointments = [make_appointment(i) for i in range(5)]
    appointments[2].is_outbound = True
    appointments[2].outbound_time = at(10, 0)

    store.save_day(DAY, appointments)

    assert store.load_day(DAY) == appointments


@pytest.mark.parametrize("content", ["{not json", '{"id": "1"}', ""])
def test_unparsable_snapshot_is_empty(store, data_dir, content):
    data_dir.mkdir(parents=True)
    (data_dir / "appointments_2024-05-20.json").write_text(content, encoding="utf-8")

    assert store.load_day(DAY) == []


def test_malformed_records_are_skipped(store, data_dir):
    good = make_appointment(1)
    data_dir.mkdir(parents=True)
    (data_dir / "appointments_2024-05-20.json").write_text(
        json.dumps([{"id": "broken"}, good.to_json()]), encoding="utf-8"
    )

    assert store.load_day(DAY) == [good]


def test_append_history_accumulates(store):
    first = HistoryEntry(action=HistoryAction.OUTBOUND, recorded_at=at(10), appointments=[make_appointment(1)])
    second = HistoryEntry(action=HistoryAction.OUTBOUND, recorded_at=at(11), appointments=[make_appointment(2)])

    store.append_history(DAY, first)
    store.append_history(DAY, second)

    history = store.load_history(DAY)
    assert [h.recorded_at for h in history] == [at(10), at(11)]
    assert history[1].appointments[0].id == make_appointment(2).id


def test_append_history_over_corrupt_file_starts_fresh(store, data_dir):
    data_dir.mkdir(parents=True)
    (data_dir / "history_2024-05-20.json").write_text("[{", encoding="utf-8")

    store.append_history(DAY, HistoryEntry(action=HistoryAction.DAILY_SAVE, recorded_at=at(0)))

    history = store.load_history(DAY)
    assert len(history) == 1
    assert history[0].action == HistoryAction.DAILY_SAVE


def test_history_is_keyed_by_day(store):
    store.append_history(DAY, HistoryEntry(action=HistoryAction.DAILY_SAVE, recorded_at=at(0)))

    assert store.load_history(date(2024, 5, 21)) == []


def test_write_failure_raises_storage_error(tmp_path):
    blocker = tmp_path / "data"
    blocker.write_text("not a directory")
    store = DailyStore(blocker)

    with pytest.raises(StorageError):
        store.save_day(DAY, [make_appointment(1)])
    assert store.load_day(DAY) == []
