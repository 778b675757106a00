"""Merge a report's comments and status changes into one chronological timeline."""

import heapq
from collections.abc import Iterator

from sqlalchemy.orm import Session

from bugtracker.models import Comment, StatusChange
from bugtracker.schemas.timeline import CommentEvent, StatusChangeEvent

# Secondary order for events sharing a timestamp: comments first, then status changes.
KIND_RANK = {"comment": 0, "status_change": 1}


def _comment_events(db: Session, report_id: int) -> Iterator[CommentEvent]:
    rows = (
        db.query(Comment)
        .filter(Comment.bug_id == report_id)
        .order_by(Comment.created_at, Comment.id)
    )
    for row in rows:
        yield CommentEvent(
            id=row.id,
            bug_id=row.bug_id,
            user_id=row.user_id,
            content=row.content,
            created_at=row.created_at,
        )


def _status_change_events(db: Session, report_id: int) -> Iterator[StatusChangeEvent]:
    rows = (
        db.query(StatusChange)
        .filter(StatusChange.bug_id == report_id)
        .order_by(StatusChange.created_at, StatusChange.id)
    )
    for row in rows:
        yield StatusChangeEvent(
            id=row.id,
            bug_id=row.bug_id,
            user_id=row.user_id,
            old_status=row.old_status,
            new_status=row.new_status,
            created_at=row.created_at,
        )


def _sort_key(event: CommentEvent | StatusChangeEvent) -> tuple:
    return (event.created_at, KIND_RANK[event.type], event.id)


def merge_events(
    comments: list[CommentEvent],
    status_changes: list[StatusChangeEvent],
) -> list[CommentEvent | StatusChangeEvent]:
    """
    Merge two streams, each already ascending by (created_at, id).

    Ties on created_at put comments before status changes, then lower id first.
    """
    return list(heapq.merge(comments, status_changes, key=_sort_key))


def build_timeline(db: Session, report_id: int) -> list[CommentEvent | StatusChangeEvent]:
    """Return all timeline events for the report, ascending. Empty when the report is unknown."""
    return merge_events(
        list(_comment_events(db, report_id)),
        list(_status_change_events(db, report_id)),
    )
