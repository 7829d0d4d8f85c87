import logging

from home_rss.errors import StorageError
from home_rss.reporting import (
    STATUS_EMPTY,
    STATUS_ERROR,
    STATUS_OK,
    SubscriptionReport,
    clean_message,
    report_errors,
)


def _report() -> SubscriptionReport:
    report = SubscriptionReport(panel_id="p-1", dataset_id="d-1", feed_url="https://x/feed")
    report.start()
    return report


def test_finish_records_status_items_and_duration() -> None:
    report = _report()

    report.finish(STATUS_OK, items=3)

    assert report.ok
    assert report.items == 3
    assert report.duration is not None and report.duration >= 0
    assert report.summary().startswith("d-1:ok(3 items, ")


def test_errors_are_deduplicated() -> None:
    report = _report()

    report.add_error("update dataset", StorageError("disk\nfull"))
    report.add_error("update dataset", StorageError("disk\nfull"))

    assert report.errors == ["update dataset: StorageError: disk full"]
    assert report.has_errors()


def test_ok_with_earlier_errors_says_so() -> None:
    report = _report()
    report.add_error("record feed source", StorageError("read-only"))

    report.finish(STATUS_OK, items=1)

    assert report.ok
    assert report.has_errors()
    assert report.message == "Completed with 1 error(s) in earlier steps"
    assert report.summary().endswith("Completed with 1 error(s) in earlier steps)")

def test_empty_status_is_not_an_error() -> None:
    report = _report()

    report.finish(STATUS_EMPTY, message="No feed available at https://x/feed")

    assert not report.ok
    assert not report.has_errors()


def test_report_errors_logs_message_and_each_error(caplog) -> None:
    report = _report()
    report.add_error("update dataset", StorageError("one"))
    report.add_error("open panel", RuntimeError("two"))
    report.finish(STATUS_ERROR, message="Could not update dataset d-1")

    with caplog.at_level(logging.ERROR):
        report_errors(report)

    assert [record.getMessage() for record in caplog.records] == [
        "Could not update dataset d-1",
        "update dataset: StorageError: one",
        "open panel: RuntimeError: two",
    ]


def test_report_errors_ignores_clean_reports(caplog) -> None:
    report = _report()
    report.finish(STATUS_ERROR, message="status only")

    with caplog.at_level(logging.DEBUG):
        report_errors(report)

    assert not caplog.records


def test_clean_message() -> None:
    assert clean_message("  a \n\t b ") == "a b"
    assert clean_message(None) == ""
