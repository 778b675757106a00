"""Tests for bugtracker.services.timeline: merge order, kind tags and tie-break."""

import unittest
from datetime import datetime, timedelta

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bugtracker.models import Base, Comment, Report, StatusChange
from bugtracker.schemas.timeline import CommentEvent, StatusChangeEvent
from bugtracker.services.timeline import build_timeline, merge_events

T0 = datetime(2024, 5, 1, 12, 0, 0)


def _at(minutes: int) -> datetime:
    return T0 + timedelta(minutes=minutes)


class TestBuildTimeline(unittest.TestCase):
    def setUp(self) -> None:
        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(engine)
        self.db = sessionmaker(bind=engine, autoflush=False)()
        report = Report(title="Login button unresponsive", tags=[])
        other = Report(title="Unrelated", tags=[])
        self.db.add_all([report, other])
        self.db.commit()
        self.report_id = report.id
        self.other_id = other.id

    def tearDown(self) -> None:
        self.db.close()

    def test_interleaves_comments_and_status_changes(self) -> None:
        # Inserted out of chronological order on purpose
        self.db.add_all(
            [
                Comment(bug_id=self.report_id, user_id=1, content="still broken", created_at=_at(3)),
                StatusChange(bug_id=self.report_id, user_id=2, old_status="Open", new_status="In Progress", created_at=_at(2)),
                Comment(bug_id=self.report_id, user_id=1, content="repro attached", created_at=_at(1)),
            ]
        )
        self.db.commit()

        events = build_timeline(self.db, self.report_id)

        self.assertEqual([e.type for e in events], ["comment", "status_change", "comment"])
        self.assertEqual(events[0].content, "repro attached")
        self.assertEqual(events[1].old_status, "Open")
        self.assertEqual(events[1].new_status, "In Progress")
        self.assertEqual(events[2].content, "still broken")

    def test_scoped_to_report(self) -> None:
        self.db.add_all(
            [
                Comment(bug_id=self.other_id, content="elsewhere", created_at=_at(1)),
                StatusChange(bug_id=self.other_id, old_status="Open", new_status="Closed", created_at=_at(2)),
                Comment(bug_id=self.report_id, content="here", created_at=_at(3)),
            ]
        )
        self.db.commit()
        events = build_timeline(self.db, self.report_id)
        self.assertEqual(len(events), 1)
        self.assertEqual(events[0].content, "here")

    def test_unknown_report_is_empty(self) -> None:
        self.assertEqual(build_timeline(self.db, 12345), [])

    def test_same_timestamp_comment_first_then_id(self) -> None:
        self.db.add_all(
            [
                StatusChange(bug_id=self.report_id, old_status="Open", new_status="Closed", created_at=_at(5)),
                Comment(bug_id=self.report_id, content="second comment", created_at=_at(5)),
            ]
        )
        self.db.commit()
        self.db.add(Comment(bug_id=self.report_id, content="third comment", created_at=_at(5)))
        self.db.commit()

        events = build_timeline(self.db, self.report_id)

        self.assertEqual([e.type for e in events], ["comment", "comment", "status_change"])
        self.assertLess(events[0].id, events[1].id)


class TestMergeEvents(unittest.TestCase):
    def test_tie_break_is_deterministic(self) -> None:
        status = StatusChangeEvent(id=1, bug_id=1, new_status="Closed", created_at=T0)
        comment = CommentEvent(id=9, bug_id=1, content="done", created_at=T0)
        self.assertEqual(merge_events([comment], [status]), [comment, status])

    def test_one_side_empty(self) -> None:
        comments = [
            CommentEvent(id=1, bug_id=1, content="a", created_at=_at(1)),
            CommentEvent(id=2, bug_id=1, content="b", created_at=_at(2)),
        ]
        self.assertEqual(merge_events(comments, []), comments)


if __name__ == "__main__":
    unittest.main()
