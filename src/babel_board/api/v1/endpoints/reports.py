# src/babel_board/api/v1/endpoints/reports.py
"""Report (flagging) endpoints for the Babel Board API."""

from fastapi import APIRouter, status

from babel_board.schemas.engagement import ReportRequest, ReportResponse
from babel_board.services.engagement import EngagementRecorder, ReportResult
from babel_board.services.targets import target_columns, target_from_ids

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/reports", tags=["reports", "moderation"])


def _to_response(result: ReportResult) -> ReportResponse:
    return ReportResponse(
        **target_columns(result.target),
        report_count=result.report_count,
        reported=result.reported,
    )


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=ReportResponse)
async def file_report(
    report_data: ReportRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ReportResponse:
    """Report a post or a comment.

    Content whose report count passes the moderation threshold disappears
    from every feed.
    """
    target = target_from_ids(report_data.post_id, report_data.comment_id)
    result = EngagementRecorder(db).apply_report(current_user.id, target, report_data.reason)
    db.commit()
    return _to_response(result)


@router.delete("/", response_model=ReportResponse)
async def withdraw_report(
    report_data: ReportRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ReportResponse:
    target = target_from_ids(report_data.post_id, report_data.comment_id)
    result = EngagementRecorder(db).retract_report(current_user.id, target)
    db.commit()
    return _to_response(result)
